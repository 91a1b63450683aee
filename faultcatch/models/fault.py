"""Raw fault signal data models."""

import traceback
from enum import IntEnum
from typing import Any, Dict, List, Protocol, runtime_checkable

from pydantic import BaseModel


class FaultLevel(IntEnum):
    """Runtime error-level taxonomy. Values are bit flags."""

    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384


@runtime_checkable
class FaultSource(Protocol):
    """Capabilities an uncaught exception must expose to be dispatched."""

    file: str
    message: str
    line: int
    trace: List[Dict[str, Any]]
    code: int


class ExceptionDetails(BaseModel):
    """Exception normalized to the file/message/line/trace/code capability set."""

    file: str
    message: str
    line: int
    trace: List[Dict[str, Any]] = []
    code: int = 0

    @classmethod
    def from_exception(cls, exception: BaseException) -> "ExceptionDetails":
        """
        Describe a raised exception.

        The location is the innermost traceback frame, i.e. where the
        exception was raised. The trace is ordered innermost first.

        Args:
            exception: Exception to describe

        Returns:
            ExceptionDetails for the exception
        """
        # Local import: services.backtrace depends on the models package
        from faultcatch.services.backtrace import frames_from_traceback

        trace = frames_from_traceback(exception.__traceback__)
        if trace:
            file, line = trace[0]["file"], trace[0]["line"]
        else:
            file, line = "", 0

        message = traceback.format_exception_only(type(exception), exception)[-1].strip()

        return cls(
            file=file,
            message=message,
            line=line,
            trace=trace,
            code=_exception_code(exception),
        )


def _exception_code(exception: BaseException) -> int:
    """Return the integer errno/code carried by an exception, or 0."""
    for attribute in ("errno", "code"):
        value = getattr(exception, attribute, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return 0
