"""
Task store boundary.

The engines never touch SQL directly: they receive a ``TaskStore`` and an
``EdgeSource`` (plus the audit and notification sinks in ``core.events``)
and only call the methods declared here. ``SqlTaskStore`` / ``SqlEdgeSource``
are the SQLModel-backed implementations used by the HTTP layer.

Every read is tenant-scoped and excludes soft-deleted rows.
"""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Protocol, Sequence

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskgraph.core.errors import NotFound, TransientStoreError
from taskgraph.models.base import utcnow
from taskgraph.models.dependency import TaskDependency
from taskgraph.models.project import Project
from taskgraph.models.task import Task
from taskgraph_shared.schemas.common import TaskStatus


class Edge(NamedTuple):
    """A raw dependency edge as handed out by an ``EdgeSource``."""
    tenant_id: uuid.UUID
    blocker_task_id: uuid.UUID
    blocked_task_id: uuid.UUID
    type: str = "blocks"


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------


class TaskStore(Protocol):
    async def get(self, task_id: uuid.UUID, tenant_id: uuid.UUID) -> Task: ...

    async def get_many(
        self, task_ids: Iterable[uuid.UUID], tenant_id: uuid.UUID
    ) -> dict[uuid.UUID, Task]: ...

    async def get_project(self, project_id: uuid.UUID, tenant_id: uuid.UUID) -> Project: ...

    async def update(
        self,
        task_id: uuid.UUID,
        tenant_id: uuid.UUID,
        fields: Mapping[str, Any],
        expected_status: Optional[TaskStatus] = None,
    ) -> Optional[Task]: ...

    async def list_by_project(self, project_id: uuid.UUID, tenant_id: uuid.UUID) -> list[Task]: ...

    async def list_by_assignee(self, user_id: uuid.UUID, tenant_id: uuid.UUID) -> list[Task]: ...

    async def list_unassigned(self, tenant_id: uuid.UUID) -> list[Task]: ...


class EdgeSource(Protocol):
    async def list_edges(
        self,
        tenant_id: uuid.UUID,
        scope_task_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> list[Edge]: ...


# ---------------------------------------------------------------------------
# SQL implementations
# ---------------------------------------------------------------------------


class SqlTaskStore:
    """SQLModel-backed task store.

    Each ``update`` commits on its own: a cascade that fails halfway keeps
    whatever it already applied.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _live(self, tenant_id: uuid.UUID):
        # populate_existing: always reflect the row, not a stale identity-map copy
        return (
            select(Task)
            .where(Task.tenant_id == tenant_id, Task.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )

    async def _all(self, stmt) -> list[Task]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise TransientStoreError("read", exc) from exc
        return list(result.scalars().all())

    async def get(self, task_id: uuid.UUID, tenant_id: uuid.UUID) -> Task:
        rows = await self._all(self._live(tenant_id).where(Task.id == task_id))
        if not rows:
            raise NotFound("Task")
        return rows[0]

    async def get_many(
        self, task_ids: Iterable[uuid.UUID], tenant_id: uuid.UUID
    ) -> dict[uuid.UUID, Task]:
        ids = list(set(task_ids))
        if not ids:
            return {}
        rows = await self._all(self._live(tenant_id).where(Task.id.in_(ids)))
        return {t.id: t for t in rows}

    async def get_project(self, project_id: uuid.UUID, tenant_id: uuid.UUID) -> Project:
        try:
            result = await self._session.execute(
                select(Project).where(
                    Project.id == project_id,
                    Project.tenant_id == tenant_id,
                    Project.deleted_at.is_(None),
                )
            )
        except SQLAlchemyError as exc:
            raise TransientStoreError("read", exc) from exc
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFound("Project")
        return project

    async def update(
        self,
        task_id: uuid.UUID,
        tenant_id: uuid.UUID,
        fields: Mapping[str, Any],
        expected_status: Optional[TaskStatus] = None,
    ) -> Optional[Task]:
        """Apply ``fields`` to one live task and commit.

        With ``expected_status`` the write is a compare-and-set: it only lands
        while the row still holds that status, otherwise nothing changes and
        ``None`` is returned. Raises ``NotFound`` for an unguarded update of a
        missing task.
        """
        values = {k: (v.value if isinstance(v, TaskStatus) else v) for k, v in fields.items()}
        values.setdefault("updated_at", utcnow())

        stmt = (
            update(Task)
            .where(
                Task.id == task_id,
                Task.tenant_id == tenant_id,
                Task.deleted_at.is_(None),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if expected_status is not None:
            stmt = stmt.where(Task.status == expected_status.value)

        try:
            result = await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise TransientStoreError("update", exc) from exc

        if result.rowcount == 0:
            if expected_status is not None:
                return None
            raise NotFound("Task")

        return await self.get(task_id, tenant_id)

    async def list_by_project(self, project_id: uuid.UUID, tenant_id: uuid.UUID) -> list[Task]:
        return await self._all(
            self._live(tenant_id)
            .where(Task.project_id == project_id)
            .order_by(Task.position, Task.created_at)
        )

    async def list_by_assignee(self, user_id: uuid.UUID, tenant_id: uuid.UUID) -> list[Task]:
        return await self._all(self._live(tenant_id).where(Task.assignee_id == user_id))

    async def list_unassigned(self, tenant_id: uuid.UUID) -> list[Task]:
        return await self._all(self._live(tenant_id).where(Task.assignee_id.is_(None)))


class SqlEdgeSource:
    """Reads raw dependency edges; validation is left to ``DependencyGraph``."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_edges(
        self,
        tenant_id: uuid.UUID,
        scope_task_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> list[Edge]:
        stmt = select(TaskDependency).where(TaskDependency.tenant_id == tenant_id)
        if scope_task_ids is not None:
            scope: Sequence[uuid.UUID] = list(set(scope_task_ids))
            if not scope:
                return []
            stmt = stmt.where(
                or_(
                    TaskDependency.blocker_task_id.in_(scope),
                    TaskDependency.blocked_task_id.in_(scope),
                )
            )
        stmt = stmt.order_by(TaskDependency.created_at)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise TransientStoreError("read", exc) from exc
        return [
            Edge(
                tenant_id=dep.tenant_id,
                blocker_task_id=dep.blocker_task_id,
                blocked_task_id=dep.blocked_task_id,
                type=dep.type,
            )
            for dep in result.scalars().all()
        ]
