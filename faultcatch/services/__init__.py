"""
Services for the fault capture pipeline.

This package contains the fault dispatcher and its collaborators:
- SeverityClassifier: Raw fault level to severity mapping
- CallerAddressResolver: Best-effort origin address of the current request
- BacktraceSanitizer: Stack capture and removal of unsafe frame fields
- FileLogSink: Append-only daily log files
"""

from faultcatch.services.backtrace import capture_stack, sanitize_backtrace
from faultcatch.services.caller_address import get_caller_address, resolve_caller_address
from faultcatch.services.classifier import classify_fault, level_for_warning
from faultcatch.services.dispatcher import FaultDispatcher
from faultcatch.services.log_sink import FileLogSink, LogSink
from faultcatch.services.suppression import is_suppressed, suppressed

__all__ = [
    "FaultDispatcher",
    "FileLogSink",
    "LogSink",
    "capture_stack",
    "classify_fault",
    "get_caller_address",
    "is_suppressed",
    "level_for_warning",
    "resolve_caller_address",
    "sanitize_backtrace",
    "suppressed",
]
