"""
State store - JSON record of the resources created on the device

Layout:

    {
      "version": 1,
      "serial": 4,
      "resources": {
        "junos_firewall_policer.policer1": {
          "type": "junos_firewall_policer",
          "id": "policer1",
          "attributes": {...}
        }
      }
    }

A lock file next to the state (fcntl.flock) keeps two runs from writing the
same state. Saves are atomic (temporary file then os.replace) and the previous
state is kept as <state>.backup.
"""

import fcntl
import json
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from junos_provider.utils.error_handling import ProviderError
from junos_provider.utils.timeout_config import TimeoutContext, TimeoutType

STATE_VERSION = 1


class StateError(ProviderError):
    """Raised when the state file cannot be read, locked or written"""

    exit_code = 9


class StateStore:
    """
    Resource state persisted in a JSON file

    Args:
        path: State file path
        backup: Keep a copy of the previous state on each save
    """

    def __init__(self, path: Union[str, Path], backup: bool = True):
        self.logger = logging.getLogger(__name__)
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.backup_path = self.path.with_name(self.path.name + ".backup")
        self.backup = backup
        self.serial = 0
        self.resources: Dict[str, Dict[str, Any]] = {}
        self._lock_fd = None

    # -- locking -------------------------------------------------------------

    def lock(self, timeout: Optional[float] = None):
        """
        Take the exclusive state lock, waiting while another run holds it

        Raises:
            StateError: Lock not acquired within the STATE_LOCK timeout
        """
        if self._lock_fd is not None:
            return
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = open(self.lock_path, "w")
        with TimeoutContext(TimeoutType.STATE_LOCK, "state_lock", timeout) as ctx:
            while True:
                try:
                    fcntl.flock(fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except OSError as e:
                    if ctx.remaining_time() <= 0:
                        fd.close()
                        raise StateError(
                            f"State file {self.path} is locked by another run",
                            guidance=f"Wait for the other run to finish or remove {self.lock_path}",
                            technical_details=str(e),
                        )
                    time.sleep(0.5)

        fd.write(f"{os.getpid()}\n")
        fd.flush()
        self._lock_fd = fd
        self.logger.debug(f"Acquired state lock {self.lock_path} (PID {os.getpid()})")

    def unlock(self):
        if self._lock_fd is None:
            return
        try:
            fcntl.flock(self._lock_fd.fileno(), fcntl.LOCK_UN)
        finally:
            self._lock_fd.close()
            self._lock_fd = None
        self.logger.debug(f"Released state lock {self.lock_path}")

    def __enter__(self):
        self.lock()
        self.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unlock()

    # -- persistence ---------------------------------------------------------

    def load(self) -> "StateStore":
        """Read the state file; a missing file is an empty state"""
        if not self.path.exists():
            self.serial = 0
            self.resources = {}
            return self
        try:
            with open(self.path, "r") as f:
                content = json.load(f)
        except (OSError, ValueError) as e:
            raise StateError(f"Cannot read state file {self.path}: {e}")

        if content.get("version") != STATE_VERSION:
            raise StateError(
                f"Unsupported state version {content.get('version')} in {self.path}",
                guidance=f"Expected version {STATE_VERSION}",
            )
        self.serial = content.get("serial", 0)
        self.resources = content.get("resources", {})
        self.logger.debug(f"Loaded state serial {self.serial} with {len(self.resources)} resources")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"version": STATE_VERSION, "serial": self.serial, "resources": self.resources}

    def save(self):
        """Write the state atomically and bump the serial"""
        self.serial += 1
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            if self.backup and self.path.exists():
                shutil.copy2(self.path, self.backup_path)
            with open(tmp_path, "w") as f:
                json.dump(self.to_dict(), f, indent=2, sort_keys=True)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StateError(f"Cannot write state file {self.path}: {e}")
        self.logger.debug(f"Saved state serial {self.serial}")

    # -- entries -------------------------------------------------------------

    def addresses(self) -> List[str]:
        return list(self.resources)

    def get(self, address: str) -> Optional[Dict[str, Any]]:
        return self.resources.get(address)

    def put(self, address: str, type_name: str, resource_id: Optional[str], attributes: Dict[str, Any]):
        self.resources[address] = {"type": type_name, "id": resource_id, "attributes": attributes}

    def remove(self, address: str):
        self.resources.pop(address, None)
