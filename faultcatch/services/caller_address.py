"""
Best-effort resolution of the address that triggered a fault.

Forwarded headers are checked before the direct peer address so that
deployments behind a reverse proxy attribute faults to the real client.
These headers are supplied by the client and can be forged: the
resolved address is for attribution in logs and display filtering only
and must not be used for access decisions without independent
verification.
"""

from contextvars import ContextVar, Token
from typing import Iterable, List, Optional, Tuple

from starlette.requests import HTTPConnection


# Header names as normalized by Starlette (lower case)
FORWARDED_HEADERS: Tuple[str, ...] = ("x-forwarded-for", "x_forwarded_for", "via")

_current_request: ContextVar[Optional[HTTPConnection]] = ContextVar("current_request", default=None)


def resolve_caller_address(candidates: Iterable[Tuple[str, Optional[str]]]) -> Optional[str]:
    """
    Return the first present, non-empty candidate value.

    Args:
        candidates: (source name, value) pairs in priority order

    Returns:
        The first non-empty value, stripped, or None if there is none
    """
    for _name, value in candidates:
        if value is not None and value.strip():
            return value.strip()
    return None


def request_candidates(request: HTTPConnection) -> List[Tuple[str, Optional[str]]]:
    """
    Build the ordered caller address candidates for a request.

    Args:
        request: Starlette request or websocket connection

    Returns:
        Forwarded header candidates followed by the direct peer address
    """
    candidates: List[Tuple[str, Optional[str]]] = [
        (header, request.headers.get(header)) for header in FORWARDED_HEADERS
    ]
    candidates.append(("remote_addr", request.client.host if request.client else None))
    return candidates


def bind_request(request: HTTPConnection) -> Token:
    """Bind a request to the current execution context."""
    return _current_request.set(request)


def reset_request(token: Token) -> None:
    """Undo a bind_request() call."""
    _current_request.reset(token)


def current_request() -> Optional[HTTPConnection]:
    """Return the request bound to the current execution context, if any."""
    return _current_request.get()


def get_caller_address() -> Optional[str]:
    """
    Resolve the caller address of the request being served.

    Returns:
        Best-effort caller address, or None outside a request
    """
    request = current_request()
    if request is None:
        return None
    return resolve_caller_address(request_candidates(request))
