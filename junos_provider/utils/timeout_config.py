"""
Timeout budgets for the blocking operations of junos-provider

    JUNOS_PROVIDER_TIMEOUT_CONNECTION    NETCONF session setup, all attempts
    JUNOS_PROVIDER_TIMEOUT_OPERATION     a single NETCONF RPC
    JUNOS_PROVIDER_TIMEOUT_CONFIG_LOCK   retrying the candidate configuration lock
    JUNOS_PROVIDER_TIMEOUT_STATE_LOCK    waiting for the state file lock

Values outside their bounds are clamped with a warning.
"""

import logging
import os
import time
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)


class TimeoutType(Enum):
    NETCONF_CONNECTION = "netconf_connection"
    NETCONF_OPERATION = "netconf_operation"
    CONFIG_LOCK = "config_lock"
    STATE_LOCK = "state_lock"


class TimeoutBounds(NamedTuple):
    env_var: str
    default: float
    min_value: float
    max_value: float
    description: str


TIMEOUTS: Dict[TimeoutType, TimeoutBounds] = {
    TimeoutType.NETCONF_CONNECTION: TimeoutBounds(
        "JUNOS_PROVIDER_TIMEOUT_CONNECTION", 30.0, 5.0, 300.0,
        "NETCONF session setup",
    ),
    TimeoutType.NETCONF_OPERATION: TimeoutBounds(
        "JUNOS_PROVIDER_TIMEOUT_OPERATION", 60.0, 10.0, 600.0,
        "single NETCONF RPC",
    ),
    TimeoutType.CONFIG_LOCK: TimeoutBounds(
        "JUNOS_PROVIDER_TIMEOUT_CONFIG_LOCK", 900.0, 10.0, 3600.0,
        "candidate configuration lock",
    ),
    TimeoutType.STATE_LOCK: TimeoutBounds(
        "JUNOS_PROVIDER_TIMEOUT_STATE_LOCK", 30.0, 1.0, 600.0,
        "state file lock",
    ),
}


def get_timeout(timeout_type: TimeoutType) -> float:
    """
    Timeout in seconds for an operation type

    The environment is read on every call, so a value exported mid-run
    applies to the next operation.
    """
    bounds = TIMEOUTS[timeout_type]
    raw = os.environ.get(bounds.env_var)
    if not raw:
        return bounds.default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid timeout {bounds.env_var}={raw!r}, using default {bounds.default}")
        return bounds.default
    if value < bounds.min_value:
        logger.warning(f"Timeout {bounds.env_var}={value} below minimum {bounds.min_value}, using minimum")
        return bounds.min_value
    if value > bounds.max_value:
        logger.warning(f"Timeout {bounds.env_var}={value} above maximum {bounds.max_value}, using maximum")
        return bounds.max_value
    return value


def validate_timeouts() -> Dict[str, Any]:
    """
    Check every timeout environment variable

    Returns:
        {"valid": bool, "warnings": [...], "errors": [...], "timeouts": {name: details}}
    """
    results = {"valid": True, "warnings": [], "errors": [], "timeouts": {}}

    for timeout_type, bounds in TIMEOUTS.items():
        raw = os.environ.get(bounds.env_var)
        results["timeouts"][timeout_type.value] = {
            "env_var": bounds.env_var,
            "env_value": raw,
            "value": get_timeout(timeout_type),
            "default": bounds.default,
            "description": bounds.description,
        }
        if not raw:
            continue
        try:
            value = float(raw)
        except ValueError:
            results["errors"].append(f"Invalid value for {bounds.env_var}: {raw}")
            results["valid"] = False
            continue
        if not bounds.min_value <= value <= bounds.max_value:
            results["warnings"].append(
                f"{bounds.env_var}={raw} outside [{bounds.min_value}, {bounds.max_value}]"
            )

    return results


class TimeoutContext:
    """
    Elapsed/remaining time of one blocking operation

    Args:
        timeout_type: Budget used when custom_timeout is not given
        operation_name: Name used in log messages
        custom_timeout: Budget in seconds overriding the configured one
    """

    def __init__(
        self,
        timeout_type: TimeoutType,
        operation_name: str = None,
        custom_timeout: float = None,
    ):
        self.timeout_type = timeout_type
        self.operation_name = operation_name or timeout_type.value
        self.timeout = custom_timeout or get_timeout(timeout_type)
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        logger.debug(f"Starting {self.operation_name} with {self.timeout}s budget")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        if elapsed > self.timeout * 0.8:
            logger.warning(f"{self.operation_name} took {elapsed:.2f}s (budget: {self.timeout}s)")
        else:
            logger.debug(f"{self.operation_name} completed in {elapsed:.2f}s")

    def remaining_time(self) -> float:
        if self.start_time is None:
            return self.timeout
        return max(0.0, self.timeout - (time.time() - self.start_time))


class LinearBackoff:
    """Waits initial_delay, then 2x, 3x... between attempts, capped at max_delay"""

    def __init__(self, initial_delay: float = 1.0, max_delay: float = 10.0, max_retries: int = 5):
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.max_retries = max_retries
        self.attempt = 0

    def next_delay(self) -> float:
        return min(self.initial_delay * (self.attempt + 1), self.max_delay)

    def delay(self, timeout_context: Optional[TimeoutContext] = None) -> bool:
        """
        Sleep before the next attempt

        Returns:
            False (without sleeping) when retries are exhausted or the wait
            would overrun the timeout context
        """
        if self.attempt >= self.max_retries:
            logger.debug(f"Max retries ({self.max_retries}) reached")
            return False

        delay_time = self.next_delay()
        if timeout_context is not None and timeout_context.remaining_time() < delay_time:
            logger.debug(f"Delay {delay_time}s would exceed {timeout_context.operation_name} budget")
            return False

        logger.debug(f"Retry {self.attempt + 1}/{self.max_retries} after {delay_time}s")
        time.sleep(delay_time)
        self.attempt += 1
        return True
