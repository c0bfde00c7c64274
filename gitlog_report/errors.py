"""Error taxonomy for a report run; every fatal condition maps to a stable exit code."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for fatal run errors.

    Attributes:
        message: Human-readable cause shown to the user.
        exit_code: Process exit status used by the CLI entry point.
    """

    exit_code = 255

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class ConfigurationError(ReportError):
    """Missing or unusable organization, token, or report format."""

    exit_code = 1


class ValidationError(ReportError):
    """The named account does not exist or is not an organization."""

    exit_code = 2


class ConnectivityError(ReportError):
    """The remote API host could not be reached."""

    exit_code = 3


class DependencyError(ReportError):
    """A required external tool is not installed."""

    exit_code = 4


class SyncError(ReportError):
    """Cloning or fetching a repository failed."""

    exit_code = 5


class ParseError(ReportError):
    """The commit log could not be read or decomposed into records."""

    exit_code = 6


class SinkError(ReportError):
    """Writing, finalizing, or verifying a report artifact failed."""

    exit_code = 7


__all__ = [
    "ReportError",
    "ConfigurationError",
    "ValidationError",
    "ConnectivityError",
    "DependencyError",
    "SyncError",
    "ParseError",
    "SinkError",
]
