"""
Status transition engine.

Applies a requested status change to one task and, when the new status is
``completed``, re-evaluates the task's direct dependents:

- a dependent sitting in ``blocked`` whose blockers are now all completed is
  moved to ``ready`` and audited as ``auto_unblocked``;
- a dependent in any other status is left alone.

The cascade is single-hop. Completing A looks at A's direct dependents only;
a chain A -> B -> C resolves when B's own completion cascades over C.

No transition-legality matrix is enforced here (any status may follow any
status); that policy sits above this layer.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import structlog
from pydantic import ValidationError

from taskgraph.core.auth import Actor
from taskgraph.core.events import AuditSink, Notifier
from taskgraph.models.base import utcnow
from taskgraph.models.task import Task
from taskgraph.services.graph import DependencyGraph
from taskgraph.services.store import EdgeSource, TaskStore
from taskgraph_shared.schemas.common import TaskStatus, normalize_status
from taskgraph_shared.schemas.tasks import AuditRecord

log = structlog.get_logger()

STATUS_CHANGED = "status_changed"
AUTO_UNBLOCKED = "auto_unblocked"


async def _emit(
    audit: AuditSink,
    notifier: Optional[Notifier],
    tenant_id: uuid.UUID,
    task_id: uuid.UUID,
    action: str,
    diff: dict,
    actor_id: Optional[uuid.UUID],
    actor_type: str,
) -> None:
    """Hand a record to the audit sink and notifier; failures are logged only."""
    try:
        entry = AuditRecord(
            tenant_id=tenant_id,
            entity_type="task",
            entity_id=task_id,
            action=action,
            diff=diff,
            actor_id=actor_id,
            actor_type=actor_type,
        )
    except ValidationError as exc:
        log.warning(
            "audit.record_invalid",
            tenant_id=str(tenant_id),
            task_id=str(task_id),
            action=action,
            error=str(exc),
        )
        return
    try:
        await audit.record(entry)
    except Exception as exc:
        log.warning(
            "audit.record_failed",
            tenant_id=str(tenant_id),
            task_id=str(task_id),
            action=action,
            error=str(exc),
        )
    if notifier is None:
        return
    try:
        await notifier.publish(entry)
    except Exception as exc:
        log.warning(
            "notify.publish_failed",
            tenant_id=str(tenant_id),
            task_id=str(task_id),
            action=action,
            error=str(exc),
        )


async def transition_task(
    store: TaskStore,
    edges: EdgeSource,
    audit: AuditSink,
    task_id: uuid.UUID,
    new_status: TaskStatus,
    actor: Actor,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Set ``task_id`` to ``new_status`` and cascade unblocking on completion.

    Raises ``NotFound`` when the task is not live in the actor's tenant and
    lets ``TransientStoreError`` through untouched. Unblocks already applied
    by the cascade stay applied if a later store call fails.
    """
    tenant_id = actor.tenant_id
    task = await store.get(task_id, tenant_id)
    old_status = normalize_status(task.status)

    fields: dict = {"status": new_status}
    if new_status == TaskStatus.COMPLETED:
        fields["completed_at"] = now or utcnow()

    updated = await store.update(task_id, tenant_id, fields)
    log.info(
        "task.transitioned",
        tenant_id=str(tenant_id),
        task_id=str(task_id),
        from_status=old_status.value,
        to_status=new_status.value,
    )

    await _emit(
        audit,
        notifier,
        tenant_id,
        task_id,
        STATUS_CHANGED,
        {"old": old_status.value, "new": new_status.value},
        actor.user_id,
        actor.actor_type,
    )

    if new_status == TaskStatus.COMPLETED:
        await cascade_unblock(store, edges, audit, task_id, actor, notifier=notifier)

    return updated


async def cascade_unblock(
    store: TaskStore,
    edges: EdgeSource,
    audit: AuditSink,
    completed_task_id: uuid.UUID,
    actor: Actor,
    notifier: Optional[Notifier] = None,
) -> list[uuid.UUID]:
    """Move direct dependents of a completed task from ``blocked`` to ``ready``.

    Safe to run more than once for the same completion: the write is a
    compare-and-set on ``blocked``, so a dependent someone else already
    unblocked is skipped. Returns the ids actually unblocked by this call.
    """
    tenant_id = actor.tenant_id
    outgoing = await DependencyGraph.load(edges, tenant_id, [completed_task_id])
    dependents = outgoing.dependents_of(completed_task_id)
    if not dependents:
        return []

    # Every edge into each dependent, so all of its blockers are visible.
    graph = await DependencyGraph.load(edges, tenant_id, dependents)
    blocker_ids: set[uuid.UUID] = set()
    for dependent_id in dependents:
        blocker_ids |= graph.blockers_of(dependent_id)

    tasks = await store.get_many(blocker_ids | dependents, tenant_id)
    statuses = {tid: normalize_status(t.status) for tid, t in tasks.items()}

    unblocked: list[uuid.UUID] = []
    for dependent_id in sorted(dependents, key=str):
        if dependent_id not in tasks:
            log.warning(
                "cascade.dependent_missing",
                tenant_id=str(tenant_id),
                blocker_task_id=str(completed_task_id),
                task_id=str(dependent_id),
            )
            continue
        if statuses[dependent_id] != TaskStatus.BLOCKED:
            continue
        if graph.is_blocked(dependent_id, statuses):
            continue

        updated = await store.update(
            dependent_id,
            tenant_id,
            {"status": TaskStatus.READY},
            expected_status=TaskStatus.BLOCKED,
        )
        if updated is None:
            # Lost the race: no longer blocked (or gone) at write time.
            log.info(
                "cascade.unblock_skipped",
                tenant_id=str(tenant_id),
                task_id=str(dependent_id),
            )
            continue

        unblocked.append(dependent_id)
        log.info(
            "task.auto_unblocked",
            tenant_id=str(tenant_id),
            task_id=str(dependent_id),
            blocker_task_id=str(completed_task_id),
        )
        await _emit(
            audit,
            notifier,
            tenant_id,
            dependent_id,
            AUTO_UNBLOCKED,
            {
                "old": TaskStatus.BLOCKED.value,
                "new": TaskStatus.READY.value,
                "blocker_task_id": str(completed_task_id),
            },
            actor.user_id,
            "system",
        )

    return unblocked
