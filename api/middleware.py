"""Caller identity middleware using ContextVar.

Authentication happens upstream (gateway or auth service); by the time a
request reaches this app the verified caller id travels in the X-User-ID
header. The id is stored in a ContextVar so that any downstream code can
depend on require_caller() without explicit parameter passing.
"""

from contextvars import ContextVar
from typing import Optional
from uuid import UUID

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.errors import Unauthenticated

CALLER_HEADER = "X-User-ID"

# ---------------------------------------------------------------------------
# Context variable: thread/task-safe caller state
# ---------------------------------------------------------------------------

_current_user: ContextVar[Optional[UUID]] = ContextVar("current_user", default=None)


def require_caller() -> UUID:
    """FastAPI dependency: the caller id, or 401 when none was supplied.

    Usage::

        @router.post("/tasks")
        async def create(caller_id: UUID = Depends(require_caller)):
            ...
    """
    caller_id = _current_user.get()
    if caller_id is None:
        raise Unauthenticated(f"Missing or invalid {CALLER_HEADER} header")
    return caller_id


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class CallerMiddleware(BaseHTTPMiddleware):
    """Extract the caller id from the X-User-ID header.

    Malformed ids are treated as absent.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        raw = request.headers.get(CALLER_HEADER)
        caller_id = None
        if raw:
            try:
                caller_id = UUID(raw.strip())
            except ValueError:
                caller_id = None

        token = _current_user.set(caller_id)
        try:
            response = await call_next(request)
            return response
        finally:
            _current_user.reset(token)
