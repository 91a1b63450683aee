"""Process-wide fault capture for web request-serving applications."""

from faultcatch.exceptions import (
    ConfigurationError,
    DispatcherAlreadyInstalledError,
    FaultCatchError,
    FaultHalt,
    LogDestinationNotConfiguredError,
)
from faultcatch.models import ErrorRecord, FaultLevel, Severity
from faultcatch.services import FaultDispatcher, suppressed

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DispatcherAlreadyInstalledError",
    "ErrorRecord",
    "FaultCatchError",
    "FaultDispatcher",
    "FaultHalt",
    "FaultLevel",
    "LogDestinationNotConfiguredError",
    "Severity",
    "suppressed",
]
