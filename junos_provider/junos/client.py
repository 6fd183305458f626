"""
Junos client - opens sessions to the managed device

Builds NETCONF sessions from the provider configuration with retry on
transient connection failures, or setfile-only sessions for the fake
create/update/delete modes.
"""

import errno
import logging
import os
import socket
import tempfile
import time
from typing import Any, Callable, Optional

from jnpr.junos import Device
from jnpr.junos.exception import (
    ConnectAuthError,
    ConnectError,
    ConnectRefusedError,
    ConnectTimeoutError,
    ConnectUnknownHostError,
    RpcError,
)

from junos_provider.junos.session import Session
from junos_provider.utils.config import ProviderConfig
from junos_provider.utils.error_handling import ConnectionError
from junos_provider.utils.logging import setup_netconf_debug_log
from junos_provider.utils.timeout_config import (
    LinearBackoff,
    TimeoutContext,
    TimeoutType,
    get_timeout,
)


class Client:
    """Factory of device sessions for one provider configuration"""

    def __init__(self, config: ProviderConfig):
        self.logger = logging.getLogger(__name__)
        self.config = config
        if config.debug_netconf_log_path:
            setup_netconf_debug_log(config.debug_netconf_log_path, config.file_mode)

    def fake_create_setfile(self) -> Optional[str]:
        return self.config.fake_create_with_setfile or None

    def fake_update_also(self) -> bool:
        return bool(self.config.fake_update_also)

    def fake_delete_also(self) -> bool:
        return bool(self.config.fake_delete_also)

    def _session_kwargs(self) -> dict:
        return {
            "cmd_sleep_short": self.config.cmd_sleep_short,
            "cmd_sleep_lock": self.config.cmd_sleep_lock,
            "commit_confirmed": self.config.commit_confirmed,
            "commit_confirmed_wait_percent": self.config.commit_confirmed_wait_percent,
            "ssh_sleep_closed": self.config.ssh_sleep_closed,
            "file_permission": self.config.file_mode,
        }

    def new_session_without_netconf(self) -> Session:
        """Session that only appends set/delete lines to the fake setfile"""
        return Session(fake_setfile=self.fake_create_setfile(), **self._session_kwargs())

    def _write_key_file(self) -> str:
        """Write sshkey_pem to a private temporary file"""
        fd, path = tempfile.mkstemp(prefix="junos-provider-", suffix=".pem")
        os.chmod(path, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(self.config.sshkey_pem)
            if not self.config.sshkey_pem.endswith("\n"):
                f.write("\n")
        return path

    def _is_retryable_netconf_error(self, e: Exception) -> bool:
        """
        Classify NETCONF connection errors as retryable or fatal

        Args:
            e: Exception to classify

        Returns:
            True if error is retryable (transient), False if fatal
        """
        error_str = str(e).lower()

        if isinstance(e, (ConnectAuthError, ConnectUnknownHostError)):
            return False
        if isinstance(e, ConnectError):
            if "auth" in error_str or "permission" in error_str:
                return False
            if "host key" in error_str:
                return False

        if isinstance(e, (ConnectTimeoutError, ConnectRefusedError)):
            return True
        if isinstance(e, ConnectError):
            if "timeout" in error_str or "refused" in error_str or "closed" in error_str:
                return True

        if isinstance(e, RpcError):
            if "timeout" in error_str or "temporary" in error_str:
                return True

        if isinstance(e, (socket.timeout, TimeoutError)):
            return True

        if isinstance(e, OSError):
            retryable_errnos = [errno.ETIMEDOUT, errno.ECONNREFUSED, errno.EHOSTUNREACH, errno.ECONNRESET]
            if getattr(e, "errno", None) in retryable_errnos:
                return True

        return False

    def _with_backoff(
        self,
        func: Callable,
        *,
        max_retries: int = 0,
        timeout_ctx: Optional[TimeoutContext] = None,
        operation_name: str = "operation",
    ) -> Any:
        """
        Execute function with linear backoff retry (1s, 2s, 3s...)

        Args:
            func: Function to execute
            max_retries: Retry attempts after the first one
            timeout_ctx: Optional timeout context
            operation_name: Name of operation for logging

        Returns:
            Result from successful function execution

        Raises:
            Last exception if all retries fail
        """
        backoff = LinearBackoff(initial_delay=1.0, max_delay=10.0, max_retries=max_retries)
        last_exception = None
        attempt_count = 0
        start_time = time.time()

        while attempt_count <= max_retries:
            try:
                return func()
            except (ConnectError, RpcError, OSError) as e:
                last_exception = e
                attempt_count += 1

                if not self._is_retryable_netconf_error(e):
                    self.logger.error(f"{operation_name} failed with fatal error: {e}")
                    raise

                if attempt_count > max_retries:
                    break

                self.logger.warning(
                    f"{operation_name} failed (attempt {attempt_count}/{max_retries + 1}), will retry: {e}"
                )
                if not backoff.delay(timeout_ctx):
                    break

        self.logger.error(
            f"{operation_name} failed after {attempt_count} attempts "
            f"({time.time() - start_time:.2f}s): {last_exception}"
        )
        raise last_exception

    def start_new_session(self) -> Session:
        """
        Open a NETCONF session and gather device facts

        Returns:
            Connected Session

        Raises:
            ConnectionError: If the device cannot be reached
        """
        host = self.config.ip
        if not host:
            raise ConnectionError(
                "Device address not configured",
                guidance="Set provider.ip in the config file or the JUNOS_HOST env var",
            )

        self.logger.info(f"Connecting to device: {host}:{self.config.port}")

        key_file = None
        device_params = {
            "host": host,
            "port": self.config.port,
            "user": self.config.username,
            "gather_facts": False,
            "normalize": True,
            "conn_open_timeout": self.config.ssh_timeout_to_establish,
        }
        if self.config.sshkey_pem:
            key_file = self._write_key_file()
            device_params["ssh_private_key_file"] = key_file
        elif self.config.sshkeyfile:
            device_params["ssh_private_key_file"] = self.config.sshkeyfile
        # A single secret is handed to ncclient: key passphrase when a key is used
        if "ssh_private_key_file" in device_params:
            secret = self.config.keypass or self.config.password
        else:
            secret = self.config.password
        if secret:
            device_params["passwd"] = secret

        device = Device(**device_params)

        def open_device():
            device.open()
            return device

        retries = self.config.ssh_retry_to_establish
        budget = self.config.ssh_timeout_to_establish * retries + sum(range(1, retries))
        try:
            with TimeoutContext(TimeoutType.NETCONF_CONNECTION, "netconf_connect", budget) as ctx:
                self._with_backoff(
                    open_device,
                    max_retries=retries - 1,
                    timeout_ctx=ctx,
                    operation_name="netconf_connect",
                )
        except (ConnectError, RpcError, OSError) as e:
            if key_file:
                os.remove(key_file)
            self.logger.error(f"Failed to connect to {host}: {e}")
            raise ConnectionError(
                f"Cannot connect to {host}: {e}",
                guidance="Check the address, credentials and that NETCONF over SSH is enabled",
            )

        # Applies to every later RPC on this device
        device.timeout = get_timeout(TimeoutType.NETCONF_OPERATION)
        session = Session(device=device, key_file=key_file, **self._session_kwargs())
        try:
            session.gather_facts()
        except Exception:
            session.close()
            raise
        self.logger.info(f"Connected to {host} - {session.system_information.hardware_model}")
        return session
