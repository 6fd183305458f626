#!/usr/bin/env python3
"""
Centralized Logging Configuration for junos-provider

Provides standardized logging setup with:
- Console and rotating file output
- Configurable log levels
- Operation timing
- Optional NETCONF debug log file
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional
import time

from junos_provider.utils.config import get_config


NETCONF_DEBUG_LOGGERS = ("ncclient", "jnpr", "junos_provider.junos")


class ProviderFormatter(logging.Formatter):
    """Formatter for junos-provider with optional colors and timing suffix"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_module: bool = True):
        """
        Initialize formatter

        Args:
            use_colors: Use ANSI color codes for console output
            include_module: Include module name in log output
        """
        self.use_colors = use_colors and sys.stderr.isatty()
        self.include_module = include_module

        if include_module:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        super().__init__(fmt=format_str, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record):
        """Format log record with optional colors"""
        if hasattr(record, "duration") and not getattr(record, "_duration_added", False):
            record.msg = f"{record.getMessage()} [took {record.duration:.3f}s]"
            record.args = ()
            record._duration_added = True

        formatted = super().format(record)

        if self.use_colors and record.levelname in self.COLORS:
            formatted = f"{self.COLORS[record.levelname]}{formatted}{self.RESET}"

        return formatted


class ProviderLogger:
    """Logger wrapper for junos-provider operations"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def timed(self, operation: str, level: int = logging.DEBUG) -> "LoggingTimer":
        """Context manager logging the start and duration of an operation"""
        return LoggingTimer(self.logger, operation, level)

    def log_resource_action(self, action: str, type_name: str, resource_id: Optional[str],
                            duration: Optional[float] = None):
        """Log a completed resource lifecycle action"""
        extra = {"duration": duration} if duration is not None else None
        self.logger.info(f"{action} {type_name} {resource_id or '(no id)'} done", extra=extra)

    def log_warnings(self, context: str, warnings: List[str]):
        """Log device warnings collected during an operation"""
        for warning in warnings:
            self.logger.warning(f"{context}: {warning}")

    def debug(self, msg, *args, **kwargs):
        """Log debug message"""
        return self.logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        """Log info message"""
        return self.logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        """Log warning message"""
        return self.logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        """Log error message"""
        return self.logger.error(msg, *args, **kwargs)


def setup_logging(
    config_manager=None,
    level: str = None,
    log_to_file: bool = None,
    log_file: str = None,
    console_colors: bool = True,
    include_modules: bool = True,
) -> Dict[str, logging.Handler]:
    """
    Setup centralized logging for junos-provider

    Args:
        config_manager: Configuration object carrying a ``logging`` section
        level: Log level override
        log_to_file: Enable file logging override
        log_file: Log file path override
        console_colors: Use colors in console output
        include_modules: Include module names in log format

    Returns:
        Dictionary of configured handlers
    """
    if config_manager is None:
        config_manager = get_config()

    logging_config = getattr(config_manager, "logging", None)

    if level is None:
        level = logging_config.level if logging_config else "INFO"
    if log_to_file is None:
        log_to_file = logging_config.log_to_file if logging_config else False
    if log_file is None:
        log_file = logging_config.log_file if logging_config else None

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = {}

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        ProviderFormatter(use_colors=console_colors, include_module=include_modules)
    )
    root_logger.addHandler(console_handler)
    handlers["console"] = console_handler

    if log_to_file and log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(ProviderFormatter(use_colors=False, include_module=True))
        root_logger.addHandler(file_handler)
        handlers["file"] = file_handler

    logger = logging.getLogger("junos_provider.logging")
    logger.debug(f"Logging configured: level={level}, handlers={list(handlers.keys())}")

    return handlers


def setup_netconf_debug_log(log_path: str, file_permission: int = 0o644) -> logging.Handler:
    """
    Attach a DEBUG file handler to the NETCONF related loggers

    Args:
        log_path: File receiving the NETCONF exchange
        file_permission: Mode applied when the file is created

    Returns:
        The attached handler
    """
    path = Path(log_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.touch(mode=file_permission)

    handler = logging.FileHandler(path)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(ProviderFormatter(use_colors=False, include_module=True))

    for name in NETCONF_DEBUG_LOGGERS:
        target = logging.getLogger(name)
        if any(getattr(h, "baseFilename", None) == handler.baseFilename for h in target.handlers):
            continue
        target.setLevel(logging.DEBUG)
        target.addHandler(handler)

    logging.getLogger("junos_provider.logging").debug(f"NETCONF debug log enabled: {path}")
    return handler


def get_logger(name: str) -> ProviderLogger:
    """
    Get junos-provider logger

    Args:
        name: Logger name (typically __name__)

    Returns:
        ProviderLogger instance
    """
    return ProviderLogger(name)


def log_system_info():
    """Log runtime information for debugging"""
    import platform

    logger = logging.getLogger("junos_provider.system")

    logger.debug(f"junos-provider starting on {platform.system()} {platform.release()}")
    logger.debug(f"Python {sys.version}")
    logger.debug(f"Working directory: {Path.cwd()}")

    # Secrets are never logged, only their presence
    for var in ("JUNOS_HOST", "JUNOS_USERNAME", "JUNOS_PASSWORD", "JUNOS_KEYFILE", "JUNOS_KEYPEM"):
        if os.getenv(var) is None:
            logger.debug(f"Environment: {var} not set")
        elif var in ("JUNOS_PASSWORD", "JUNOS_KEYPEM"):
            logger.debug(f"Environment: {var} is set")
        else:
            logger.debug(f"Environment: {var}={os.getenv(var)}")


class LoggingTimer:
    """
    Context manager timing an operation

    The completion record carries the duration, rendered by ProviderFormatter
    as a `[took Xs]` suffix. The duration stays available as .duration.
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.log(self.level, f"Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.time() - self.start_time
        if exc_type is None:
            self.logger.log(self.level, f"Completed {self.operation}", extra={"duration": self.duration})
        else:
            self.logger.error(f"Failed {self.operation}: {exc_val}", extra={"duration": self.duration})
        return False
