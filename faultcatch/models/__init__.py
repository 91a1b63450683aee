"""Data models for the fault capture pipeline."""

from .entity import Entity
from .error import RECORD_FIELDS, ErrorRecord, ScopeValue, Severity, snapshot_scope
from .fault import ExceptionDetails, FaultLevel, FaultSource
from .options import DispatcherOptions

__all__ = [
    # Entity base
    "Entity",
    # Error record models
    "ErrorRecord",
    "RECORD_FIELDS",
    "ScopeValue",
    "Severity",
    "snapshot_scope",
    # Fault signal models
    "ExceptionDetails",
    "FaultLevel",
    "FaultSource",
    # Options
    "DispatcherOptions",
]
