"""Exception hierarchy for the SOAP-UI automation engine."""
from typing import Optional


class SoapUIEngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(SoapUIEngineError, ValueError):
    """A run request is incomplete or points at something that does not exist.

    Raised before any process is spawned.
    """


class ConfigurationError(SoapUIEngineError):
    """The settings file is missing, empty, or invalid."""


class LaunchError(SoapUIEngineError):
    """The SOAP-UI runner executable could not be started."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        working_dir: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.working_dir = working_dir
