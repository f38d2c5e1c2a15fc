"""Task model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin


class Task(UUIDMixin, TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = (
        sa.Index("tasks_tenant_project_idx", "tenant_id", "project_id"),
        sa.Index("tasks_tenant_assignee_idx", "tenant_id", "assignee_id"),
        sa.Index("tasks_tenant_status_idx", "tenant_id", "status"),
    )

    tenant_id: uuid.UUID = Field(nullable=False)
    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False)
    parent_task_id: Optional[uuid.UUID] = Field(default=None, index=True)  # subtasks; not a dependency
    title: str = Field(nullable=False)
    description: Optional[str] = None
    # Open strings on purpose; normalized through taskgraph_shared on read
    status: str = Field(nullable=False, default="created")
    priority: str = Field(nullable=False, default="medium")
    assignee_id: Optional[uuid.UUID] = None
    due_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    position: int = Field(default=0, nullable=False)
