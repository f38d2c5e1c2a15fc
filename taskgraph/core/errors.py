"""
Error taxonomy for the task graph engine.

Hard errors subclass ``HTTPException`` so they surface unchanged through the
route handlers. ``InvalidEdge`` never leaves graph construction: bad edges are
logged and skipped.
"""

from __future__ import annotations

from fastapi import HTTPException


class NotFound(HTTPException):
    """Task, project or dependency does not exist in the caller's tenant."""

    def __init__(self, entity: str = "Task"):
        super().__init__(status_code=404, detail=f"{entity} not found")
        self.entity = entity


class DependencyConflict(HTTPException):
    """Rejected dependency write (self-loop, duplicate, or cycle)."""

    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


class TransientStoreError(HTTPException):
    """The task store could not be read or written."""

    def __init__(self, operation: str, cause: BaseException | None = None):
        super().__init__(status_code=503, detail=f"Task store unavailable during {operation}")
        self.operation = operation
        self.__cause__ = cause


class InvalidEdge(ValueError):
    """A dependency edge that cannot take part in graph queries."""

    def __init__(self, reason: str, blocker_task_id, blocked_task_id):
        super().__init__(reason)
        self.reason = reason
        self.blocker_task_id = blocker_task_id
        self.blocked_task_id = blocked_task_id
