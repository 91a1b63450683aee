"""
Utility modules for faultcatch.
"""

from faultcatch.utils.logging import (
    get_logger,
    setup_logging,
    JSONFormatter,
    log_fault_captured,
    log_error_with_context,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "log_fault_captured",
    "log_error_with_context",
]
