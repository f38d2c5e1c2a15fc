"""
Dependency edge management: add, remove and list blocker -> blocked edges.

Writes reject self-dependencies, duplicates and edges that would close a
cycle. Reads elsewhere still tolerate cyclic data written before these checks
existed.
"""

from __future__ import annotations

import uuid
from collections import defaultdict, deque

import structlog
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskgraph.core.errors import DependencyConflict, NotFound, TransientStoreError
from taskgraph.models.dependency import TaskDependency
from taskgraph.services.store import SqlTaskStore
from taskgraph_shared.schemas.common import DependencyType

log = structlog.get_logger()


async def _has_path(
    session: AsyncSession,
    from_id: uuid.UUID,
    to_id: uuid.UUID,
    tenant_id: uuid.UUID,
) -> bool:
    """BFS along blocker -> blocked edges: can ``from_id`` reach ``to_id``?"""
    result = await session.execute(
        select(TaskDependency).where(TaskDependency.tenant_id == tenant_id)
    )
    adj: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    for dep in result.scalars().all():
        if dep.type == DependencyType.IS_BLOCKED_BY.value:
            adj[dep.blocked_task_id].append(dep.blocker_task_id)
        else:
            adj[dep.blocker_task_id].append(dep.blocked_task_id)

    visited: set[uuid.UUID] = set()
    queue = deque([from_id])
    while queue:
        current = queue.popleft()
        if current == to_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        queue.extend(adj.get(current, []))
    return False


async def add_dependency(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    blocker_task_id: uuid.UUID,
    blocked_task_id: uuid.UUID,
    dep_type: DependencyType = DependencyType.BLOCKS,
) -> TaskDependency:
    if dep_type == DependencyType.IS_BLOCKED_BY:
        # "blocker is blocked by blocked": store it the canonical way round.
        blocker_task_id, blocked_task_id = blocked_task_id, blocker_task_id

    if blocker_task_id == blocked_task_id:
        raise DependencyConflict("A task cannot depend on itself")

    store = SqlTaskStore(session)
    await store.get(blocker_task_id, tenant_id)
    await store.get(blocked_task_id, tenant_id)

    existing = await session.execute(
        select(TaskDependency).where(
            TaskDependency.blocker_task_id == blocker_task_id,
            TaskDependency.blocked_task_id == blocked_task_id,
        )
    )
    if existing.scalar_one_or_none():
        raise DependencyConflict("Dependency already exists")

    # Adding blocker -> blocked closes a cycle iff blocked already reaches blocker.
    if await _has_path(session, blocked_task_id, blocker_task_id, tenant_id):
        raise DependencyConflict("Adding this dependency would create a circular dependency")

    dep = TaskDependency(
        tenant_id=tenant_id,
        blocker_task_id=blocker_task_id,
        blocked_task_id=blocked_task_id,
        type=DependencyType.BLOCKS.value,
    )
    session.add(dep)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise TransientStoreError("add_dependency", exc) from exc
    await session.refresh(dep)

    log.info(
        "dependency.added",
        tenant_id=str(tenant_id),
        dependency_id=str(dep.id),
        blocker_task_id=str(blocker_task_id),
        blocked_task_id=str(blocked_task_id),
    )
    return dep


async def remove_dependency(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    dependency_id: uuid.UUID,
) -> None:
    result = await session.execute(
        select(TaskDependency).where(
            TaskDependency.id == dependency_id,
            TaskDependency.tenant_id == tenant_id,
        )
    )
    dep = result.scalar_one_or_none()
    if not dep:
        raise NotFound("Dependency")
    await session.delete(dep)
    await session.commit()
    log.info("dependency.removed", tenant_id=str(tenant_id), dependency_id=str(dependency_id))


async def list_dependencies(
    session: AsyncSession,
    tenant_id: uuid.UUID,
    task_id: uuid.UUID,
) -> list[TaskDependency]:
    """Edges where ``task_id`` is either the blocker or the blocked task."""
    result = await session.execute(
        select(TaskDependency)
        .where(
            TaskDependency.tenant_id == tenant_id,
            or_(
                TaskDependency.blocker_task_id == task_id,
                TaskDependency.blocked_task_id == task_id,
            ),
        )
        .order_by(TaskDependency.created_at)
    )
    return list(result.scalars().all())
