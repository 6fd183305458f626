"""
Junos device session - NETCONF/PyEZ wrapper used by every resource

A Session owns one PyEZ Device and its Config utility. It runs CLI commands,
loads set/delete lines into the candidate configuration, takes and releases
the candidate lock, and commits. A session created without NETCONF only
appends set/delete lines to a local file (fake create/update/delete modes).
"""

import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from jnpr.junos.exception import (
    CommitError,
    ConfigLoadError,
    LockError,
    RpcError,
    UnlockError,
)
from jnpr.junos.utils.config import Config

from junos_provider.junos.constants import EMPTY_W
from junos_provider.utils.error_handling import ProviderError
from junos_provider.utils.timeout_config import TimeoutContext, TimeoutType


# Process wide mutex serializing device reads and setfile writes
_mutex = threading.Lock()


def mutex_lock():
    """Acquire the process wide session mutex"""
    _mutex.acquire()


def mutex_unlock():
    """Release the process wide session mutex"""
    _mutex.release()


class SessionError(ProviderError):
    """Raised when a NETCONF command, load or commit fails"""

    exit_code = 6


class ConfigLockError(SessionError):
    """Raised when the candidate configuration cannot be locked"""

    exit_code = 5


@dataclass
class SystemInformation:
    """Facts from the get-system-information RPC"""

    hardware_model: str = ""
    os_name: str = ""
    os_version: str = ""
    serial_number: str = ""
    host_name: str = ""
    cluster_node: bool = False

    def not_compatible_msg(self) -> str:
        return f" not compatible with Junos device \"{self.hardware_model}\""

    def check_compatibility_security(self) -> bool:
        return self.hardware_model.lower().startswith("srx")


def _split_rpc_errors(exc: RpcError) -> Tuple[List[str], List[str]]:
    """Split the rpc-error entries of an exception into (errors, warnings)"""
    errs = getattr(exc, "errs", None) or []
    if not errs:
        return [str(exc)], []

    errors, warnings = [], []
    for err in errs:
        message = (err.get("message") or "").strip()
        if err.get("bad_element"):
            message = f"{message} (statement: {err['bad_element']})"
        if err.get("severity") == "error":
            errors.append(message)
        else:
            warnings.append(message)
    return errors, warnings


def _reply_text(reply) -> str:
    """Text carried by an RPC reply element (True or None means no output)"""
    if reply is None or isinstance(reply, bool):
        return ""
    if isinstance(reply, str):
        return reply
    return reply.text or ""


class Session:
    """
    One open connection to a Junos device

    Args:
        device: Opened PyEZ Device, None for a setfile-only session
        cmd_sleep_short: Milliseconds to sleep after each device action
        cmd_sleep_lock: Seconds to sleep between candidate lock attempts
        commit_confirmed: Minutes for `commit confirmed`, None for plain commits
        commit_confirmed_wait_percent: Share of the confirmed delay to wait
            before confirming
        ssh_sleep_closed: Seconds to sleep after closing the connection
        fake_setfile: File receiving set/delete lines instead of the device
        file_permission: Mode used when fake_setfile is created
        key_file: Temporary private key removed on close
    """

    def __init__(
        self,
        device=None,
        cmd_sleep_short: int = 100,
        cmd_sleep_lock: int = 10,
        commit_confirmed: Optional[int] = None,
        commit_confirmed_wait_percent: int = 90,
        ssh_sleep_closed: int = 0,
        fake_setfile: Optional[str] = None,
        file_permission: int = 0o644,
        key_file: Optional[str] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.device = device
        self.config = Config(device) if device is not None else None
        self.cmd_sleep_short = cmd_sleep_short
        self.cmd_sleep_lock = cmd_sleep_lock
        self.commit_confirmed = commit_confirmed
        self.commit_confirmed_wait_percent = commit_confirmed_wait_percent
        self.ssh_sleep_closed = ssh_sleep_closed
        self.fake_setfile = fake_setfile
        self.file_permission = file_permission
        self.key_file = key_file
        self.system_information = SystemInformation()

    @property
    def netconf(self) -> bool:
        return self.device is not None

    def _require_netconf(self, action: str):
        if not self.netconf:
            raise SessionError(f"{action} needs a NETCONF session")

    def sleep_short(self):
        if self.cmd_sleep_short:
            time.sleep(self.cmd_sleep_short / 1000)

    def gather_facts(self) -> SystemInformation:
        """Populate system_information from get-system-information"""
        self._require_netconf("gather facts")
        try:
            reply = self.device.rpc.get_system_information()
        except RpcError as e:
            raise SessionError("executing get-system-information failed", technical_details=str(e))

        def text(tag: str) -> str:
            return (reply.findtext(tag) or "").strip()

        self.system_information = SystemInformation(
            hardware_model=text("hardware-model"),
            os_name=text("os-name"),
            os_version=text("os-version"),
            serial_number=text("serial-number"),
            host_name=text("host-name"),
            cluster_node=reply.find("cluster-node") is not None,
        )
        self.logger.debug(
            f"Device facts: model={self.system_information.hardware_model} "
            f"version={self.system_information.os_version}"
        )
        return self.system_information

    def command(self, cmd: str) -> str:
        """
        Run a CLI command (show ...) and return its text output

        Returns:
            The output, or EMPTY_W when the device returned nothing
        """
        self._require_netconf("command")
        self.logger.debug(f"command: {cmd}")
        try:
            reply = self.device.rpc.cli(cmd, format="text")
        except RpcError as e:
            errors, _ = _split_rpc_errors(e)
            raise SessionError(f"command '{cmd}' failed: {'; '.join(errors)}")
        finally:
            self.sleep_short()

        output = _reply_text(reply)
        if not output.strip():
            return EMPTY_W
        return output

    def config_get(self, fmt: str = "set") -> str:
        """Committed configuration as text ("set", "text")"""
        self._require_netconf("get configuration")
        try:
            reply = self.device.rpc.get_config(options={"database": "committed", "format": fmt})
        except RpcError as e:
            raise SessionError(f"get-configuration failed: {e}")
        finally:
            self.sleep_short()
        return _reply_text(reply)

    def config_set(self, lines: Iterable[str]):
        """Load set/delete lines into the candidate configuration (or the setfile)"""
        lines = list(lines)
        if not lines:
            return
        if self.fake_setfile:
            self._append_setfile(lines)
            return

        self._require_netconf("load configuration")
        for line in lines:
            self.logger.debug(f"load: {line}")
        try:
            self.config.load("\n".join(lines), format="set")
        except ConfigLoadError as e:
            errors, warnings = _split_rpc_errors(e)
            for warning in warnings:
                self.logger.warning(f"load configuration: {warning}")
            if errors:
                raise SessionError("\n".join(errors))
        except RpcError as e:
            raise SessionError(f"load configuration failed: {e}")
        finally:
            self.sleep_short()

    def _append_setfile(self, lines: List[str]):
        mutex_lock()
        try:
            fd = os.open(self.fake_setfile, os.O_WRONLY | os.O_APPEND | os.O_CREAT, self.file_permission)
            with os.fdopen(fd, "a") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as e:
            raise SessionError(f"failed to write in file {self.fake_setfile}: {e}")
        finally:
            mutex_unlock()
        self.logger.debug(f"Appended {len(lines)} lines to {self.fake_setfile}")

    def config_lock(self, timeout: Optional[float] = None):
        """
        Lock the candidate configuration, retrying while another user holds it

        Args:
            timeout: Seconds before giving up (CONFIG_LOCK timeout by default)

        Raises:
            ConfigLockError: The lock could not be acquired in time
        """
        self._require_netconf("config lock")
        with TimeoutContext(TimeoutType.CONFIG_LOCK, "config_lock", timeout) as ctx:
            while True:
                try:
                    self.config.lock()
                    self.logger.debug("candidate configuration locked")
                    self.sleep_short()
                    return
                except LockError as e:
                    self.logger.debug(
                        f"candidate configuration lock attempt failed, retry in {self.cmd_sleep_lock}s: {e}"
                    )
                if ctx.remaining_time() <= self.cmd_sleep_lock:
                    raise ConfigLockError("candidate configuration lock attempt aborted")
                time.sleep(self.cmd_sleep_lock)

    def config_clear(self) -> List[str]:
        """
        Discard candidate changes and release the lock

        Returns:
            Warnings for the steps that failed
        """
        self._require_netconf("config clear")
        warnings = []
        try:
            self.config.rollback(0)
        except (RpcError, ValueError) as e:
            warnings.append(f"config clear: {e}")
        self.sleep_short()
        try:
            self.config.unlock()
        except UnlockError as e:
            errors, others = _split_rpc_errors(e)
            warnings.extend(f"config unlock: {m}" for m in errors + others)
        except RpcError as e:
            warnings.append(f"config unlock: {e}")
        self.sleep_short()
        return warnings

    def _commit(self, kind: str, func) -> List[str]:
        try:
            func()
        except CommitError as e:
            errors, warnings = _split_rpc_errors(e)
            if errors:
                raise SessionError(f"{kind} failed: " + "\n".join(errors))
            return warnings
        except RpcError as e:
            raise SessionError(f"{kind} failed: {e}")
        return []

    def commit_conf(self, log_message: str) -> List[str]:
        """
        Commit the candidate configuration

        With commit_confirmed set, the commit is sent as `commit confirmed`
        and confirmed with `commit check` once the wait share has elapsed.

        Returns:
            Warnings returned by the device
        """
        self._require_netconf("commit")
        if not self.commit_confirmed:
            warnings = self._commit(
                "commit-configuration", lambda: self.config.commit(comment=log_message)
            )
            self.sleep_short()
            return warnings

        warnings = self._commit(
            "commit-configuration(confirmed)",
            lambda: self.config.commit(comment=log_message, confirm=self.commit_confirmed),
        )
        wait = self.commit_confirmed * 60 * self.commit_confirmed_wait_percent / 100
        self.logger.info(f"Commit confirmed {self.commit_confirmed}m, confirming in {wait:.0f}s")
        time.sleep(wait)
        warnings.extend(self._commit("commit-configuration(check)", self.config.commit_check))
        self.sleep_short()
        return warnings

    def close(self):
        """Close the NETCONF session and remove the temporary key file"""
        try:
            if self.device is not None:
                try:
                    self.device.close()
                    self.logger.debug("Disconnected from device")
                finally:
                    if self.ssh_sleep_closed:
                        time.sleep(self.ssh_sleep_closed)
                    self.device = None
                    self.config = None
        finally:
            if self.key_file:
                try:
                    os.remove(self.key_file)
                except FileNotFoundError:
                    pass
                self.key_file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
