"""POSIX-conventional exit codes for CLI error paths.

Every ``SystemExit`` raised by a command carries one of these values
instead of a bare ``1``. Values follow sysexits.h and errno conventions.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes used by the gridmail CLI.

    * 2: ENOENT (missing attachment file)
    * 22: EINVAL (bad option values)
    * 69: EX_UNAVAILABLE (SendGrid unreachable or rejected the request)
    * 78: EX_CONFIG (no API key)

    Example:
        >>> int(ExitCode.DELIVERY_FAILURE)
        69
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    FILE_NOT_FOUND = 2
    INVALID_ARGUMENT = 22
    DELIVERY_FAILURE = 69
    CONFIG_ERROR = 78


__all__ = ["ExitCode"]
