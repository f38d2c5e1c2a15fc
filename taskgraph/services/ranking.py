"""
"What's next": a user's actionable tasks ordered by urgency.

Candidates are the user's open tasks plus open unassigned tasks. Anything with
an incomplete blocker is dropped, then the rest sort by

1. overdue before not overdue,
2. due date ascending (no due date last),
3. priority (critical first).

Each item carries a deterministic, human-readable reason.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timedelta
from typing import Optional

from taskgraph.models.base import as_utc, utcnow
from taskgraph.models.task import Task
from taskgraph.services.graph import DependencyGraph
from taskgraph.services.store import EdgeSource, TaskStore
from taskgraph_shared.schemas.common import (
    CLOSED_STATUSES,
    PRIORITY_RANK,
    TaskPriority,
    normalize_priority,
    normalize_status,
)
from taskgraph_shared.schemas.tasks import TaskRead, WhatsNextItem

DEFAULT_LIMIT = 10
_DAY = timedelta(days=1)


def _is_overdue(task: Task, now: datetime) -> bool:
    due = as_utc(task.due_date)
    return due is not None and due < now


def sort_key(task: Task, now: datetime) -> tuple:
    due = as_utc(task.due_date)
    return (
        0 if _is_overdue(task, now) else 1,
        0 if due is not None else 1,
        due or now,
        PRIORITY_RANK[normalize_priority(task.priority)],
    )


def _days(delta: timedelta) -> int:
    return math.ceil(delta / _DAY)


def reason_for(task: Task, now: datetime) -> str:
    """Why this task is on the list; rules are checked in order, first match wins."""
    due = as_utc(task.due_date)
    if due is not None and due < now:
        return f"Overdue by {max(1, _days(now - due))} day(s)"
    if due is not None:
        return f"Due in {_days(due - now)} day(s)"
    priority = normalize_priority(task.priority)
    if priority in (TaskPriority.CRITICAL, TaskPriority.HIGH):
        return f"{priority.value.capitalize()} priority task"
    if task.assignee_id is None:
        return "Unassigned — available to pick up"
    return "Assigned to you"


def to_read(task: Task) -> TaskRead:
    return TaskRead(
        id=task.id,
        tenant_id=task.tenant_id,
        project_id=task.project_id,
        parent_task_id=task.parent_task_id,
        title=task.title,
        description=task.description,
        status=normalize_status(task.status),
        priority=normalize_priority(task.priority),
        assignee_id=task.assignee_id,
        due_date=as_utc(task.due_date),
        completed_at=as_utc(task.completed_at),
        created_at=as_utc(task.created_at),
        updated_at=as_utc(task.updated_at),
    )


async def whats_next(
    store: TaskStore,
    edges: EdgeSource,
    user_id: uuid.UUID,
    tenant_id: uuid.UUID,
    limit: int = DEFAULT_LIMIT,
    now: Optional[datetime] = None,
) -> list[WhatsNextItem]:
    """Top ``limit`` actionable tasks for ``user_id``; empty list when nothing qualifies."""
    now = as_utc(now) or utcnow()

    candidates: dict[uuid.UUID, Task] = {}
    for task in await store.list_by_assignee(user_id, tenant_id):
        candidates.setdefault(task.id, task)
    for task in await store.list_unassigned(tenant_id):
        candidates.setdefault(task.id, task)
    open_tasks = [
        t for t in candidates.values()
        if normalize_status(t.status) not in CLOSED_STATUSES
    ]
    if not open_tasks:
        return []

    graph = await DependencyGraph.load(edges, tenant_id, [t.id for t in open_tasks])
    blocker_ids: set[uuid.UUID] = set()
    for task in open_tasks:
        blocker_ids |= graph.blockers_of(task.id)
    blockers = await store.get_many(blocker_ids, tenant_id)
    statuses = {tid: normalize_status(t.status) for tid, t in blockers.items()}

    actionable = [t for t in open_tasks if not graph.is_blocked(t.id, statuses)]
    actionable.sort(key=lambda t: sort_key(t, now))

    return [
        WhatsNextItem(task=to_read(t), reason=reason_for(t, now))
        for t in actionable[:limit]
    ]
