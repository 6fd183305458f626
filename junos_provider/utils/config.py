#!/usr/bin/env python3
"""
Configuration Management for junos-provider

Provides centralized configuration handling with:
- Environment variable support (JUNOS_* for the device connection)
- Configuration file support
- Default values and validation
- Runtime configuration management
"""

import os
import json
import threading
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, List
import logging


logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true")


def _env_int(name: str, current: Optional[int]) -> Optional[int]:
    """Integer from environment, keeping the current value when unset or invalid"""
    value = os.getenv(name)
    if not value:
        return current
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring invalid integer in {name}: {value!r}")
        return current


def _env_bool(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in TRUE_VALUES


@dataclass
class ProviderConfig:
    """Connection and commit behavior for the managed Junos device"""

    ip: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    sshkey_pem: Optional[str] = None
    sshkeyfile: Optional[str] = None
    keypass: Optional[str] = None
    cmd_sleep_short: Optional[int] = None
    cmd_sleep_lock: Optional[int] = None
    commit_confirmed: Optional[int] = None
    commit_confirmed_wait_percent: Optional[int] = None
    ssh_sleep_closed: Optional[int] = None
    ssh_timeout_to_establish: Optional[int] = None
    ssh_retry_to_establish: Optional[int] = None
    file_permission: Optional[str] = None
    debug_netconf_log_path: Optional[str] = None
    fake_create_with_setfile: Optional[str] = None
    fake_update_also: bool = False
    fake_delete_also: bool = False

    def __post_init__(self):
        """Fill unset options from environment variables, then defaults"""
        if self.ip is None:
            self.ip = os.getenv("JUNOS_HOST")
        if self.port is None:
            self.port = _env_int("JUNOS_PORT", 830)
        if self.username is None:
            self.username = os.getenv("JUNOS_USERNAME") or "netconf"
        if self.password is None:
            self.password = os.getenv("JUNOS_PASSWORD")
        if self.sshkey_pem is None:
            self.sshkey_pem = os.getenv("JUNOS_KEYPEM")
        if self.sshkeyfile is None:
            self.sshkeyfile = os.getenv("JUNOS_KEYFILE")
        if self.sshkeyfile:
            self.sshkeyfile = os.path.expanduser(self.sshkeyfile)
        if self.keypass is None:
            self.keypass = os.getenv("JUNOS_KEYPASS")
        if self.cmd_sleep_short is None:
            self.cmd_sleep_short = _env_int("JUNOS_SLEEP_SHORT", 100)
        if self.cmd_sleep_lock is None:
            self.cmd_sleep_lock = _env_int("JUNOS_SLEEP_LOCK", 10)
        if self.commit_confirmed is None:
            self.commit_confirmed = _env_int("JUNOS_COMMIT_CONFIRMED", None)
        if self.commit_confirmed_wait_percent is None:
            self.commit_confirmed_wait_percent = _env_int(
                "JUNOS_COMMIT_CONFIRMED_WAIT_PERCENT", 90
            )
        if self.ssh_sleep_closed is None:
            self.ssh_sleep_closed = _env_int("JUNOS_SLEEP_SSH_CLOSED", 0)
        if self.ssh_timeout_to_establish is None:
            self.ssh_timeout_to_establish = _env_int("JUNOS_SSH_TIMEOUT_TO_ESTABLISH", 30)
        if self.ssh_retry_to_establish is None:
            self.ssh_retry_to_establish = _env_int("JUNOS_SSH_RETRY_TO_ESTABLISH", 1)
        if self.file_permission is None:
            self.file_permission = os.getenv("JUNOS_FILE_PERMISSION") or "0644"
        if self.debug_netconf_log_path is None:
            self.debug_netconf_log_path = os.getenv("JUNOS_LOG_PATH")
        if self.fake_create_with_setfile is None:
            self.fake_create_with_setfile = os.getenv("JUNOS_FAKECREATE_SETFILE")
        if not self.fake_update_also:
            self.fake_update_also = _env_bool("JUNOS_FAKEUPDATE_ALSO")
        if not self.fake_delete_also:
            self.fake_delete_also = _env_bool("JUNOS_FAKEDELETE_ALSO")

    @property
    def file_mode(self) -> int:
        """file_permission parsed as an octal mode"""
        return int(str(self.file_permission), 8)


@dataclass
class LoggingConfig:
    """Logging configuration"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    log_to_file: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        """Load from environment variables if not set"""
        if os.getenv("JUNOS_PROVIDER_LOG_LEVEL"):
            self.level = os.getenv("JUNOS_PROVIDER_LOG_LEVEL").upper()
        if os.getenv("JUNOS_PROVIDER_LOG_FILE"):
            self.log_file = os.getenv("JUNOS_PROVIDER_LOG_FILE")
            self.log_to_file = True


@dataclass
class EngineConfig:
    """Plan/apply engine configuration"""

    state_path: str = "junos-provider.state.json"
    backup_state: bool = True

    def __post_init__(self):
        """Load from environment variables if not set"""
        if os.getenv("JUNOS_PROVIDER_STATE"):
            self.state_path = os.getenv("JUNOS_PROVIDER_STATE")
        if os.getenv("JUNOS_PROVIDER_BACKUP_STATE"):
            self.backup_state = os.getenv("JUNOS_PROVIDER_BACKUP_STATE").lower() in TRUE_VALUES


@dataclass
class JunosProviderConfig:
    """Provider, logging and engine settings read by every command"""

    provider: ProviderConfig = None
    logging: LoggingConfig = None
    engine: EngineConfig = None

    def __post_init__(self):
        if self.provider is None:
            self.provider = ProviderConfig()
        if self.logging is None:
            self.logging = LoggingConfig()
        if self.engine is None:
            self.engine = EngineConfig()


class ConfigManager:
    """Loads the JSON settings file, env overrides apply on top of it"""

    DEFAULT_CONFIG_PATHS = [
        Path.home() / ".config/junos-provider/config.json",
        Path("/etc/junos-provider/config.json"),
        Path("./config.json"),
    ]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Settings file tried before DEFAULT_CONFIG_PATHS (the --config flag)
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = config_path
        self.config = JunosProviderConfig()

        self._load_config()

    def _load_config(self):
        """First settings file found wins; a broken file is logged and skipped"""
        config_file = self._find_config_file()
        if config_file:
            try:
                self._load_from_file(config_file)
                self.logger.info(f"Using settings file {config_file}")
            except (OSError, ValueError, TypeError) as e:
                self.logger.warning(f"Ignoring settings file {config_file}: {e}")

        # JUNOS_* and JUNOS_PROVIDER_* variables are read by the dataclasses themselves
        self.logger.debug(f"Provider settings for device {self.config.provider.ip or '(unset)'}")

    def _find_config_file(self) -> Optional[Path]:
        if self.config_path and self.config_path.exists():
            return self.config_path

        for path in self.DEFAULT_CONFIG_PATHS:
            if path.exists():
                return path

        return None

    def _load_from_file(self, config_path: Path):
        with open(config_path, "r") as f:
            self._load_from_dict(json.load(f))

    def _load_from_dict(self, data: dict):
        """Sections: provider, logging, engine; unknown keys raise TypeError"""
        if "provider" in data:
            self.config.provider = ProviderConfig(**data["provider"])

        if "logging" in data:
            self.config.logging = LoggingConfig(**data["logging"])

        if "engine" in data:
            self.config.engine = EngineConfig(**data["engine"])

    def save_config(self, config_path: Optional[Path] = None) -> Path:
        """Write the settings without secrets; returns the written path"""
        if config_path is None:
            config_path = self.DEFAULT_CONFIG_PATHS[0]

        config_path.parent.mkdir(parents=True, exist_ok=True)

        provider = asdict(self.config.provider)
        # Secrets stay in the environment
        for secret in ("password", "sshkey_pem", "keypass"):
            provider[secret] = None

        config_dict = {
            "provider": provider,
            "logging": asdict(self.config.logging),
            "engine": asdict(self.config.engine),
        }

        with open(config_path, "w") as f:
            json.dump(config_dict, f, indent=2)

        self.logger.info(f"Settings written to {config_path}")
        return config_path

    def get_config(self) -> JunosProviderConfig:
        """Settings, checking the JUNOS_PROVIDER_TIMEOUT_* variables on first access"""
        if not hasattr(self, "_timeouts_validated"):
            from junos_provider.utils.timeout_config import validate_timeouts

            timeout_results = validate_timeouts()

            for warning in timeout_results["warnings"]:
                self.logger.warning(f"Timeout: {warning}")
            for error in timeout_results["errors"]:
                self.logger.error(f"Timeout: {error}")

            self._timeouts_validated = True

        return self.config

    @classmethod
    def validate_object(cls, data: dict) -> List[str]:
        """Issues of a settings dictionary, without reading files or touching the global manager"""
        manager = cls.__new__(cls)
        manager.logger = logger
        manager.config_path = None
        manager.config = JunosProviderConfig()

        try:
            manager._load_from_dict(data)
        except TypeError as e:
            return [f"Unknown setting: {e}"]

        return manager.validate_config()

    def validate_config(self) -> List[str]:
        """Range and consistency issues of the loaded settings (empty when usable)"""
        issues = []
        provider = self.config.provider

        if not provider.ip:
            issues.append("Device address not configured (set JUNOS_HOST env var)")

        if not isinstance(provider.port, int) or not 1 <= provider.port <= 65535:
            issues.append(f"Invalid port: {provider.port} (must be 1-65535)")

        for name in ("cmd_sleep_short", "cmd_sleep_lock", "ssh_sleep_closed"):
            value = getattr(provider, name)
            if not isinstance(value, int) or value < 0:
                issues.append(f"Invalid {name}: {value} (must be a positive integer or 0)")

        if provider.commit_confirmed is not None and not 1 <= provider.commit_confirmed <= 65535:
            issues.append(
                f"Invalid commit_confirmed: {provider.commit_confirmed} (must be 1-65535 minutes)"
            )

        if not 0 <= provider.commit_confirmed_wait_percent <= 99:
            issues.append(
                f"Invalid commit_confirmed_wait_percent: "
                f"{provider.commit_confirmed_wait_percent} (must be 0-99)"
            )

        if not isinstance(provider.ssh_timeout_to_establish, int) or provider.ssh_timeout_to_establish < 1:
            issues.append(
                f"Invalid ssh_timeout_to_establish: {provider.ssh_timeout_to_establish} "
                f"(must be at least 1 second)"
            )

        if not 1 <= provider.ssh_retry_to_establish <= 10:
            issues.append(
                f"Invalid ssh_retry_to_establish: {provider.ssh_retry_to_establish} (must be 1-10)"
            )

        try:
            if provider.file_mode > 0o777:
                issues.append(f"Invalid file_permission: {provider.file_permission} (max 0777)")
        except ValueError:
            issues.append(f"Invalid file_permission: {provider.file_permission} (must be octal)")

        if provider.sshkeyfile and not Path(provider.sshkeyfile).exists():
            issues.append(f"SSH key file not found: {provider.sshkeyfile}")

        if (provider.fake_update_also or provider.fake_delete_also) and not provider.fake_create_with_setfile:
            issues.append(
                "'fake_create_with_setfile' need to be set with "
                "'fake_update_also' and 'fake_delete_also'"
            )

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.config.logging.level.upper() not in valid_levels:
            issues.append(
                f"Invalid log level: {self.config.logging.level} (must be one of {valid_levels})"
            )

        return issues

    def print_config(self):
        """Print current configuration (sanitized)"""
        provider = self.config.provider
        secrets = {"password", "sshkey_pem", "keypass"}

        print("junos-provider Configuration:")
        print("  Provider:")
        for field in fields(provider):
            value = getattr(provider, field.name)
            if field.name in secrets:
                value = "Set" if value else "Not set"
            elif value is None:
                value = "Not set"
            print(f"    {field.name}: {value}")

        print("  Logging:")
        print(f"    Level: {self.config.logging.level}")
        print(f"    Log to file: {self.config.logging.log_to_file}")
        if self.config.logging.log_file:
            print(f"    Log file: {self.config.logging.log_file}")

        print("  Engine:")
        print(f"    State file: {self.config.engine.state_path}")
        print(f"    Backup state: {self.config.engine.backup_state}")


# Global configuration instance with thread-safe singleton pattern
_config_manager = None
_config_manager_lock = threading.RLock()


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """
    Get global configuration manager instance using double-checked locking.

    The first check is lockless, the lock is only taken during initialization.
    """
    global _config_manager

    if _config_manager is not None:
        return _config_manager

    with _config_manager_lock:
        if _config_manager is None:
            thread_id = threading.current_thread().ident
            logging.getLogger(__name__).debug(
                f"Initializing ConfigManager singleton in thread {thread_id}"
            )
            _config_manager = ConfigManager(config_path)

        return _config_manager


def reset_config_manager():
    """Drop the global configuration manager (next call reloads)"""
    global _config_manager
    with _config_manager_lock:
        _config_manager = None


def get_config() -> JunosProviderConfig:
    """Get current configuration"""
    return get_config_manager().get_config()
