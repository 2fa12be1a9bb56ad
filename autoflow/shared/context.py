"""Request context management using contextvars.

Holds request-scoped values (request id) that must be visible to code far
from the HTTP layer, e.g. log records emitted by the execution engine.

Usage:
    token = set_request_id("abc123")
    ...
    reset_request_id(token)
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token[str | None]:
    """Set the current request id; return the token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    """Restore the request id that was current before set_request_id."""
    _request_id.reset(token)


def get_request_id() -> str | None:
    """Return the current request id if set."""
    return _request_id.get()
