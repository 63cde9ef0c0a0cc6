"""log-audit exception hierarchy."""

from __future__ import annotations

from pathlib import Path


class LogAuditError(Exception):
    """Base exception for all log-audit errors."""


class ConfigError(LogAuditError):
    """Raised when the configuration or a command-line value is invalid."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""


class InvalidDateError(ConfigError):
    """Raised when a date is not a well-formed YYYY-MM-DD calendar date."""


class DateRangeError(ConfigError):
    """Raised when the start date falls after the end date."""


class DependencyMissingError(ConfigError):
    """Raised when a codec required for every run is unavailable."""


class AlreadyRunningError(LogAuditError):
    """Raised when another run holds the lock marker."""


class OutputPermissionError(LogAuditError):
    """Raised when the output directory, lock file or workspace cannot be created or written."""


class FileSkipError(LogAuditError):
    """Raised when a single log file cannot be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
