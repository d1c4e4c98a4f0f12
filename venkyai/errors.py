"""Exception types raised by the orchestrator."""

from typing import Optional


class VenkyError(Exception):
    """Base class for VenkyAI errors."""


class ConfigError(VenkyError):
    """Configuration could not be loaded or is invalid."""


class CommandError(VenkyError):
    """A backend command failed.

    Wraps whatever the backend raised so callers only need to handle one type.
    """

    def __init__(self, command: str, cause: Optional[BaseException] = None):
        self.command = command
        self.cause = cause
        message = f"{command} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
