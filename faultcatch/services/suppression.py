"""
Reporting suppression.

Code that expects a fault and does not want it reported wraps the
operation in ``suppressed()``. Faults raised inside the block are
ignored by the dispatcher entirely.

Usage:
    with suppressed():
        legacy_call_that_warns()
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator


_suppression_depth: ContextVar[int] = ContextVar("suppression_depth", default=0)


@contextmanager
def suppressed() -> Iterator[None]:
    """Silence fault reporting for the duration of the block. Nests."""
    token = _suppression_depth.set(_suppression_depth.get() + 1)
    try:
        yield
    finally:
        _suppression_depth.reset(token)


def is_suppressed() -> bool:
    """Return True if fault reporting is silenced in the current context."""
    return _suppression_depth.get() > 0
