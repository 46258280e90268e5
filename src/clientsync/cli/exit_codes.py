"""
Exit codes for the clientsync CLI.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes; 130 follows the shell convention for SIGINT."""

    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    FILE_NOT_FOUND = 3
    VALIDATION_ERROR = 4
    SYNC_ERROR = 5
    MANUAL_ATTENTION = 6
    CANCELLED = 7
    SIGINT = 130
