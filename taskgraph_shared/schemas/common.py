from __future__ import annotations

from enum import Enum

import structlog

log = structlog.get_logger()


class TaskStatus(str, Enum):
    CREATED = "created"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DependencyType(str, Enum):
    BLOCKS = "blocks"
    IS_BLOCKED_BY = "is_blocked_by"


# Statuses that never surface as actionable work
CLOSED_STATUSES: frozenset["TaskStatus"] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.CANCELLED}
)

# Lower rank sorts first
PRIORITY_RANK: dict["TaskPriority", int] = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


def normalize_status(raw: object) -> TaskStatus:
    """Map a persisted status string onto the enum.

    Unknown values are data corruption; they read back as ``created``
    rather than failing the whole query.
    """
    if isinstance(raw, TaskStatus):
        return raw
    try:
        return TaskStatus(raw)
    except ValueError:
        log.warning("task.malformed_status", raw=raw, normalized=TaskStatus.CREATED.value)
        return TaskStatus.CREATED


def normalize_priority(raw: object) -> TaskPriority:
    if isinstance(raw, TaskPriority):
        return raw
    try:
        return TaskPriority(raw)
    except ValueError:
        log.warning("task.malformed_priority", raw=raw, normalized=TaskPriority.MEDIUM.value)
        return TaskPriority.MEDIUM
