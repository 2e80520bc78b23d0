"""Error taxonomy for task lifecycle operations.

Every failure surfaced by the core is one of these. Each carries a
``kind`` tag and the HTTP status the boundary reports it with, so the
router never has to translate domain errors by hand.
"""
from __future__ import annotations

from typing import Any


class TaskTrackerError(Exception):
    """Base class for recoverable, caller-facing failures."""

    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class InvalidInput(TaskTrackerError):
    """A required field is missing or malformed."""

    kind = "invalid_input"
    status_code = 400


class Unauthenticated(TaskTrackerError):
    """No caller identity was supplied by the boundary."""

    kind = "unauthenticated"
    status_code = 401


class Forbidden(TaskTrackerError):
    """The caller lacks the owner/assignee relationship the action needs."""

    kind = "forbidden"
    status_code = 403


class NotFound(TaskTrackerError):
    """A referenced task, user or checklist item does not resolve."""

    kind = "not_found"
    status_code = 404
