"""
Exceptions raised by the fault capture pipeline.
"""

from typing import Optional


class FaultCatchError(Exception):
    """Base class for faultcatch errors."""
    pass


class ConfigurationError(FaultCatchError):
    """Raised when the dispatcher is configured with invalid options."""
    pass


class LogDestinationNotConfiguredError(ConfigurationError):
    """Raised when a record must be written but no log directory has been set."""

    def __init__(self) -> None:
        super().__init__(
            "Fault needs to be written to a log file but no log directory has been set. "
            "Set the log directory with FaultDispatcher.set_log_directory() "
            "or the FAULTCATCH_LOG_DIRECTORY setting"
        )


class DispatcherAlreadyInstalledError(ConfigurationError):
    """Raised when initialize() is called on a dispatcher whose hooks are already installed."""
    pass


class FaultHalt(BaseException):
    """
    Ends the current request after a fault has been handled.

    Derives from BaseException so application code catching Exception
    does not swallow it. The fault capture middleware converts it into
    an error response.
    """

    def __init__(self, body: Optional[str] = None):
        super().__init__(body)
        self.body = body
