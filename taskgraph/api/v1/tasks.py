"""
Task endpoints: status transitions and the "what's next" list.

Status values: created, ready, in_progress, review, completed, blocked, cancelled.
- Completing a task auto-unblocks direct dependents sitting in ``blocked``.
- Every applied transition is audited and published to Redis.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskgraph.core.auth import Actor, require_actor
from taskgraph.core.config import get_settings
from taskgraph.core.database import get_session
from taskgraph.core.events import Notifier, SqlAuditSink, get_notifier
from taskgraph.services.ranking import to_read, whats_next
from taskgraph.services.store import SqlEdgeSource, SqlTaskStore
from taskgraph.services.transitions import transition_task
from taskgraph_shared.schemas.tasks import TaskRead, TaskTransition, WhatsNextRead

router = APIRouter()


@router.get("/whats-next", response_model=WhatsNextRead)
async def whats_next_endpoint(
    tenant_id: uuid.UUID,
    limit: Optional[int] = Query(None, ge=1),
    auth: Actor = Depends(require_actor),
    session: AsyncSession = Depends(get_session),
):
    """Ranked actionable tasks for the calling user."""
    settings = get_settings()
    limit = min(limit or settings.whats_next_limit, settings.whats_next_max_limit)
    items = await whats_next(
        SqlTaskStore(session),
        SqlEdgeSource(session),
        auth.user_id,
        auth.tenant_id,
        limit=limit,
    )
    return WhatsNextRead(user_id=auth.user_id, items=items)


@router.post("/{task_id}/status", response_model=TaskRead)
async def transition_task_endpoint(
    tenant_id: uuid.UUID,
    task_id: uuid.UUID,
    body: TaskTransition,
    auth: Actor = Depends(require_actor),
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Transition a task to a new status; completion cascades to dependents."""
    task = await transition_task(
        SqlTaskStore(session),
        SqlEdgeSource(session),
        SqlAuditSink(session),
        task_id,
        body.status,
        auth,
        notifier=notifier,
    )
    return to_read(task)
