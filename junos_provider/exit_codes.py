"""
junos-provider Exit Codes

Standardized process exit codes so wrappers (CI jobs, schedulers) can react
to the outcome of a plan or apply run without parsing output.
"""

from enum import IntEnum
from typing import Dict, Optional
import logging


class ProviderExitCodes(IntEnum):
    """
    Standardized exit codes for junos-provider commands

    Exit codes follow UNIX conventions:
    - 0: Success
    - 1-2: User/configuration errors
    - 3-63: Application-specific errors
    - 64-113: System errors (sysexits.h convention)
    - 128+: Signal termination
    """

    SUCCESS = 0

    GENERAL_ERROR = 1
    INVALID_USAGE = 2

    # Returned by `plan --detailed-exitcode` when changes are pending
    CHANGES_PENDING = 3
    NETCONF_CONNECTION_FAILED = 4
    CONFIG_LOCK_FAILED = 5
    COMMIT_FAILED = 6
    RESOURCE_NOT_FOUND = 7
    RESOURCE_CONFLICT = 8
    STATE_ERROR = 9
    VALIDATION_FAILED = 21

    CONFIG_ERROR = 78

    SIGINT_TERMINATION = 130


EXIT_CODE_DESCRIPTIONS: Dict[ProviderExitCodes, str] = {
    ProviderExitCodes.SUCCESS: "Operation completed successfully",
    ProviderExitCodes.GENERAL_ERROR: "General error",
    ProviderExitCodes.INVALID_USAGE: "Invalid command line usage",
    ProviderExitCodes.CHANGES_PENDING: "Plan succeeded and changes are pending",
    ProviderExitCodes.NETCONF_CONNECTION_FAILED: "NETCONF connection to the device failed",
    ProviderExitCodes.CONFIG_LOCK_FAILED: "Candidate configuration lock could not be acquired",
    ProviderExitCodes.COMMIT_FAILED: "Configuration load or commit failed on the device",
    ProviderExitCodes.RESOURCE_NOT_FOUND: "Resource or routing instance not found on the device",
    ProviderExitCodes.RESOURCE_CONFLICT: "Resource already exists on the device",
    ProviderExitCodes.STATE_ERROR: "State file could not be read, locked or written",
    ProviderExitCodes.VALIDATION_FAILED: "Manifest or resource validation failed",
    ProviderExitCodes.CONFIG_ERROR: "Provider configuration error",
    ProviderExitCodes.SIGINT_TERMINATION: "Interrupted by user (SIGINT)",
}


def get_exit_code_description(exit_code: int) -> str:
    """Human readable description of an exit code"""
    try:
        return EXIT_CODE_DESCRIPTIONS[ProviderExitCodes(exit_code)]
    except (ValueError, KeyError):
        return f"Unknown exit code {exit_code}"


class ExitCodeManager:
    """Exit code handling with logging"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def log_exit(self, exit_code: int, message: str = "") -> int:
        """
        Log the outcome of a command and return its exit code

        Args:
            exit_code: Exit code returned by the command
            message: Optional context message

        Returns:
            The exit code unchanged
        """
        description = get_exit_code_description(exit_code)
        if exit_code in (ProviderExitCodes.SUCCESS, ProviderExitCodes.CHANGES_PENDING):
            self.logger.debug(f"junos-provider finished ({exit_code}): {description} {message}".rstrip())
        elif exit_code >= 128:
            self.logger.warning(f"junos-provider terminated by signal ({exit_code}): {message}")
        else:
            self.logger.error(f"junos-provider error ({exit_code}): {description} {message}".rstrip())
        return exit_code
