"""
Call stack capture and backtrace sanitization.

Raw frames are dicts with ``function``, ``file`` and ``line`` keys, plus
``class``, ``type`` and ``args`` when the frame belongs to a method or
argument values were captured. ``type`` is the call-site marker: ``->``
for instance methods, ``::`` for class methods.
"""

import inspect
from types import FrameType, TracebackType
from typing import Any, Dict, Iterable, List, Mapping, Optional

BACKTRACE_LIMIT = 5

# Frame fields that are not safe to persist or display
UNSAFE_FRAME_FIELDS = ("type", "args")

_INTERNAL_MODULES = ("warnings", "_py_warnings")


def sanitize_backtrace(frames: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Remove call-site markers and argument values from every frame.

    Order and all other fields are preserved. Sanitizing an already
    sanitized backtrace returns an equal backtrace.

    Args:
        frames: Raw frames, innermost first

    Returns:
        New list of sanitized frame dicts
    """
    if not frames:
        return []
    return [
        {key: value for key, value in frame.items() if key not in UNSAFE_FRAME_FIELDS}
        for frame in frames
    ]


def describe_frame(frame: FrameType, lineno: int, include_args: bool = True) -> Dict[str, Any]:
    """
    Describe one interpreter frame as a raw backtrace entry.

    Args:
        frame: Interpreter frame
        lineno: Line currently executing in the frame
        include_args: Whether to capture argument values

    Returns:
        Raw frame dict
    """
    code = frame.f_code
    entry: Dict[str, Any] = {
        "function": code.co_name,
        "file": code.co_filename,
        "line": lineno,
    }

    argnames = code.co_varnames[:code.co_argcount + code.co_kwonlyargcount]
    if argnames:
        first = frame.f_locals.get(argnames[0])
        if argnames[0] == "self" and first is not None:
            entry["class"] = type(first).__name__
            entry["type"] = "->"
        elif argnames[0] == "cls" and isinstance(first, type):
            entry["class"] = first.__name__
            entry["type"] = "::"

    if include_args:
        entry["args"] = {name: frame.f_locals.get(name) for name in argnames}

    return entry


def frames_from_traceback(tb: Optional[TracebackType]) -> List[Dict[str, Any]]:
    """
    Convert an exception traceback into raw frames, innermost first.

    Args:
        tb: Traceback of a raised exception

    Returns:
        Raw frames including call-site markers and argument values
    """
    frames = []
    while tb is not None:
        frames.append(describe_frame(tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    frames.reverse()
    return frames


def is_internal_frame(frame: FrameType) -> bool:
    """Return True for frames of this package and of the warnings machinery."""
    module = frame.f_globals.get("__name__", "")
    return module in _INTERNAL_MODULES or module == "faultcatch" or module.startswith("faultcatch.")


def first_external_frame() -> Optional[FrameType]:
    """Return the innermost frame outside this package and the warnings machinery."""
    frame = inspect.currentframe()
    while frame is not None and is_internal_frame(frame):
        frame = frame.f_back
    return frame


def find_frame(filename: str, lineno: int) -> Optional[FrameType]:
    """
    Find the frame currently executing the given source location.

    Args:
        filename: Source file reported for the fault
        lineno: Line reported for the fault

    Returns:
        Matching frame, or None if it is no longer on the stack
    """
    frame = first_external_frame()
    while frame is not None:
        if frame.f_code.co_filename == filename and frame.f_lineno == lineno:
            return frame
        frame = frame.f_back
    return None


def capture_stack(limit: int = BACKTRACE_LIMIT) -> List[Dict[str, Any]]:
    """
    Capture the current call stack without argument values.

    Capture starts at the first frame outside this package and the
    warnings machinery.

    Args:
        limit: Maximum number of frames to capture

    Returns:
        Raw frames, innermost first
    """
    frames = []
    frame = first_external_frame()
    while frame is not None and len(frames) < limit:
        frames.append(describe_frame(frame, frame.f_lineno, include_args=False))
        frame = frame.f_back
    return frames
