"""
Severity classification of raw fault signals.

Maps a runtime error level, or the fact that a fault came from an
uncaught exception, to a Severity.
"""

from typing import Dict, Optional, Tuple, Type, Union

from faultcatch.models.error import Severity
from faultcatch.models.fault import FaultLevel


SEVERITY_BY_LEVEL: Dict[int, Severity] = {
    FaultLevel.ERROR: Severity.FATAL,
    FaultLevel.CORE_ERROR: Severity.FATAL,
    FaultLevel.COMPILE_ERROR: Severity.FATAL,
    FaultLevel.PARSE: Severity.FATAL,
    FaultLevel.USER_ERROR: Severity.ERROR,
    FaultLevel.RECOVERABLE_ERROR: Severity.ERROR,
    FaultLevel.WARNING: Severity.WARNING,
    FaultLevel.CORE_WARNING: Severity.WARNING,
    FaultLevel.COMPILE_WARNING: Severity.WARNING,
    FaultLevel.USER_WARNING: Severity.WARNING,
    FaultLevel.NOTICE: Severity.INFO,
    FaultLevel.USER_NOTICE: Severity.INFO,
    FaultLevel.STRICT: Severity.STRICT,
}

# Most specific category first
LEVEL_BY_WARNING: Tuple[Tuple[Type[Warning], FaultLevel], ...] = (
    (UserWarning, FaultLevel.USER_WARNING),
    (SyntaxWarning, FaultLevel.COMPILE_WARNING),
    (PendingDeprecationWarning, FaultLevel.DEPRECATED),
    (DeprecationWarning, FaultLevel.DEPRECATED),
    (FutureWarning, FaultLevel.USER_DEPRECATED),
    (ResourceWarning, FaultLevel.NOTICE),
)


def classify_fault(
    level: Optional[Union[int, str]] = None,
    uncaught_exception: bool = False
) -> Severity:
    """
    Classify a raw fault signal.

    Args:
        level: Runtime error level, as an int or a numeric string
        uncaught_exception: Whether the fault came from an uncaught exception

    Returns:
        Severity for the signal; UNCLASSIFIED for unknown levels
    """
    if uncaught_exception:
        return Severity.EXCEPTION

    try:
        number = int(level)
    except (TypeError, ValueError):
        return Severity.UNCLASSIFIED

    return SEVERITY_BY_LEVEL.get(number, Severity.UNCLASSIFIED)


def level_for_warning(category: Type[Warning]) -> FaultLevel:
    """
    Map a Python warning category onto the runtime error-level taxonomy.

    Args:
        category: Warning class passed to warnings.showwarning

    Returns:
        Matching FaultLevel; WARNING for categories without a closer match
    """
    for warning_class, level in LEVEL_BY_WARNING:
        if issubclass(category, warning_class):
            return level
    return FaultLevel.WARNING
