#!/usr/bin/env python3
"""
Junos Provider Error Handling Utilities

Provides standardized error formatting, parameter validation, and user guidance
for consistent error reporting across the junos-provider commands.

Error Format Standards:
- INFO: "✓ {message}"                    # Success messages
- WARNING: "⚠ {message}"                 # Warning messages
- ERROR: "✗ {message}"                   # Error messages
- FATAL: "✗ Fatal: {message}"            # Critical errors
- USAGE: "Usage: {usage_help}"           # Usage guidance
"""

import os
import logging
from pathlib import Path
from typing import Optional, Union
from functools import wraps

from jnpr.junos.exception import ConnectAuthError, ConnectError, RpcError


class ErrorSeverity:
    """Error severity levels for consistent classification"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"
    USAGE = "usage"


class ProviderError(Exception):
    """Base exception class for junos-provider with standardized error handling"""

    # Process exit code used by handle_errors (see exit_codes.ProviderExitCodes)
    exit_code = 1

    def __init__(self, message: str, severity: str = ErrorSeverity.ERROR,
                 guidance: Optional[str] = None, technical_details: Optional[str] = None):
        self.message = message
        self.severity = severity
        self.guidance = guidance
        self.technical_details = technical_details
        super().__init__(message)


class ValidationError(ProviderError):
    """Raised when parameter or resource validation fails"""

    exit_code = 21

    def __init__(self, message: str, parameter: str = None, guidance: str = None):
        self.parameter = parameter
        super().__init__(message, ErrorSeverity.ERROR, guidance)


class ConfigurationError(ProviderError):
    """Raised when provider configuration is invalid or missing"""

    exit_code = 78


class ConnectionError(ProviderError):
    """Raised when the NETCONF connection to a device fails"""

    exit_code = 4


# (exception class, summary, guidance) for errors raised outside ProviderError; first match wins
EXCEPTION_GUIDANCE = (
    (ConnectAuthError, "NETCONF authentication failed",
     "Check JUNOS_USERNAME and the password or SSH key settings"),
    (ConnectError, "NETCONF connection failed",
     "Check the device address and that 'set system services netconf ssh' is committed"),
    (RpcError, "Device rejected the request",
     "Run with --verbose or set JUNOS_LOG_PATH to capture the RPC exchange"),
    (FileNotFoundError, "File not found",
     "Check that the file path is correct and the file exists"),
    (PermissionError, "Permission denied",
     "Check file permissions or run with appropriate privileges"),
    (TimeoutError, "Operation timed out",
     "Check network connectivity or raise the JUNOS_PROVIDER_TIMEOUT_* values"),
    (ValueError, "Invalid input",
     "Verify input parameters and try again"),
)


class ErrorFormatter:
    """Centralized error message formatting with consistent symbols and styles"""

    SYMBOLS = {
        ErrorSeverity.INFO: "✓",
        ErrorSeverity.WARNING: "⚠",
        ErrorSeverity.ERROR: "✗",
        ErrorSeverity.FATAL: "✗ Fatal:",
        ErrorSeverity.USAGE: "Usage:"
    }

    @classmethod
    def format_message(cls, message: str, severity: str = ErrorSeverity.ERROR,
                       guidance: Optional[str] = None) -> str:
        """Format a message with the appropriate symbol and structure"""
        symbol = cls.SYMBOLS.get(severity, "•")
        formatted = f"{symbol} {message}"

        if guidance:
            formatted += f"\n  Suggestion: {guidance}"

        return formatted

    @classmethod
    def format_error(cls, error: Union[Exception, ProviderError],
                     hide_technical: bool = True) -> str:
        """Format an exception with appropriate level of detail"""
        if isinstance(error, ProviderError):
            formatted = cls.format_message(error.message, error.severity, error.guidance)
            if not hide_technical and error.technical_details:
                formatted += f"\n  Technical: {error.technical_details}"
            return formatted

        if isinstance(error, KeyboardInterrupt):
            return cls.format_message("Operation interrupted by user", ErrorSeverity.WARNING)

        for error_class, summary, guidance in EXCEPTION_GUIDANCE:
            if isinstance(error, error_class):
                return cls.format_message(f"{summary}: {error}", ErrorSeverity.ERROR, guidance)

        if hide_technical:
            return cls.format_message(f"Unexpected error occurred: {error}", ErrorSeverity.ERROR,
                                      "Check logs for details or run with --verbose")
        return cls.format_message(f"Unexpected {type(error).__name__}: {error}", ErrorSeverity.ERROR)


class ParameterValidator:
    """Parameter validation with range checks and user guidance"""

    @staticmethod
    def validate_file_exists(file_path: Union[str, Path], parameter_name: str = "file") -> Path:
        """Validate that a file exists and is readable"""
        path = Path(file_path)

        if not path.exists():
            raise ValidationError(
                f"File does not exist: {path}",
                parameter_name,
                "Check the file path and ensure the file exists"
            )

        if not path.is_file():
            raise ValidationError(
                f"Path is not a file: {path}",
                parameter_name,
                "Provide a path to a file, not a directory"
            )

        if not os.access(path, os.R_OK):
            raise ValidationError(
                f"Cannot read file: {path}",
                parameter_name,
                "Check file permissions or run with appropriate privileges"
            )

        return path

    @staticmethod
    def validate_parent_writable(file_path: Union[str, Path],
                                 parameter_name: str = "file") -> Path:
        """Validate that the directory holding a file is writable"""
        path = Path(file_path)
        parent = path.parent if str(path.parent) else Path(".")

        if parent.exists() and not parent.is_dir():
            raise ValidationError(
                f"Parent path exists but is not a directory: {parent}",
                parameter_name,
                "Provide a path inside a directory"
            )

        try:
            parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            raise ValidationError(
                f"Cannot create directory: {parent}",
                parameter_name,
                "Check parent directory permissions or choose a different location"
            )

        if not os.access(parent, os.W_OK):
            raise ValidationError(
                f"Cannot write to directory: {parent}",
                parameter_name,
                "Check directory permissions or run with appropriate privileges"
            )

        return path


def handle_errors(logger_name: str = None, hide_technical: bool = True):
    """Decorator for standardized error handling in command functions"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(logger_name or f'junos_provider.{func.__name__}')

            try:
                return func(*args, **kwargs)
            except ProviderError as e:
                logger.error(f"{e.severity.title()} in {func.__name__}: {e.message}")
                print(ErrorFormatter.format_error(e, hide_technical))

                if e.severity == ErrorSeverity.FATAL:
                    return 2
                elif e.severity == ErrorSeverity.ERROR:
                    return e.exit_code
                else:
                    return 0

            except KeyboardInterrupt:
                logger.info(f"Command {func.__name__} interrupted by user")
                print(ErrorFormatter.format_message("Operation interrupted by user",
                                                    ErrorSeverity.WARNING))
                return 130

            except Exception as e:
                logger.error(f"Unexpected error in {func.__name__}: {e}")
                print(ErrorFormatter.format_error(e, hide_technical))
                return 1

        return wrapper
    return decorator


def print_success(message: str):
    """Print a success message with consistent formatting"""
    print(ErrorFormatter.format_message(message, ErrorSeverity.INFO))


def print_warning(message: str, guidance: str = None):
    """Print a warning message with consistent formatting"""
    print(ErrorFormatter.format_message(message, ErrorSeverity.WARNING, guidance))


def print_error(message: str, guidance: str = None):
    """Print an error message with consistent formatting"""
    print(ErrorFormatter.format_message(message, ErrorSeverity.ERROR, guidance))


def validate_common_args(args):
    """Validate common command-line arguments"""
    validator = ParameterValidator()

    if getattr(args, 'manifest', None):
        validator.validate_file_exists(args.manifest, "manifest")

    if getattr(args, 'state', None):
        validator.validate_parent_writable(args.state, "state")

    if getattr(args, 'config', None):
        validator.validate_file_exists(args.config, "config")

    return args


__all__ = [
    'ErrorSeverity', 'ProviderError', 'ValidationError', 'ConfigurationError', 'ConnectionError',
    'ErrorFormatter', 'ParameterValidator', 'handle_errors',
    'print_success', 'print_warning', 'print_error',
    'validate_common_args'
]
