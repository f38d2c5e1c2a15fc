"""
Shared fixtures: an on-disk SQLite database per test plus small factories
for projects, tasks and dependency edges.
"""

from __future__ import annotations

import os

os.environ.setdefault("TG_NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("TG_LOG_FORMAT", "text")

import uuid
from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

import taskgraph.models  # noqa: F401
from taskgraph.core.auth import Actor
from taskgraph.models.dependency import TaskDependency
from taskgraph.models.project import Project
from taskgraph.models.task import Task
from taskgraph_shared.schemas.tasks import AuditRecord


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskgraph.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def tenant_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def actor(tenant_id, user_id) -> Actor:
    return Actor(tenant_id=tenant_id, user_id=user_id)


@pytest.fixture
async def project(session, tenant_id) -> Project:
    p = Project(tenant_id=tenant_id, name="Launch")
    session.add(p)
    await session.commit()
    return p


@pytest.fixture
def make_task(session, tenant_id, project):
    position = {"next": 0}

    async def _make(
        title: str,
        status: str = "created",
        priority: str = "medium",
        assignee_id: Optional[uuid.UUID] = None,
        due_date: Optional[datetime] = None,
        tenant: Optional[uuid.UUID] = None,
        project_id: Optional[uuid.UUID] = None,
    ) -> Task:
        task = Task(
            tenant_id=tenant or tenant_id,
            project_id=project_id or project.id,
            title=title,
            status=status,
            priority=priority,
            assignee_id=assignee_id,
            due_date=due_date,
            position=position["next"],
        )
        position["next"] += 1
        session.add(task)
        await session.commit()
        return task

    return _make


@pytest.fixture
def add_edge(session, tenant_id):
    async def _add(blocker: Task, blocked: Task, tenant: Optional[uuid.UUID] = None) -> TaskDependency:
        dep = TaskDependency(
            tenant_id=tenant or tenant_id,
            blocker_task_id=blocker.id,
            blocked_task_id=blocked.id,
        )
        session.add(dep)
        await session.commit()
        return dep

    return _add


class RecordingAuditSink:
    """Collects audit records in memory."""

    def __init__(self):
        self.records: list[AuditRecord] = []

    async def record(self, entry: AuditRecord) -> None:
        self.records.append(entry)

    def actions(self, entity_id: uuid.UUID) -> list[str]:
        return [r.action for r in self.records if r.entity_id == entity_id]


@pytest.fixture
def audit() -> RecordingAuditSink:
    return RecordingAuditSink()
