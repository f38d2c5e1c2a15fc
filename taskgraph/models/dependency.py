"""Task dependency edge model (tenant-scoped)."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class TaskDependency(UUIDMixin, SQLModel, table=True):
    """Directed edge: ``blocker_task_id`` must complete before ``blocked_task_id``."""

    __tablename__ = "task_dependencies"
    __table_args__ = (
        sa.CheckConstraint("blocker_task_id != blocked_task_id", name="no_self_dependency"),
        sa.UniqueConstraint("blocker_task_id", "blocked_task_id", name="task_deps_blocker_blocked_uq"),
    )

    tenant_id: uuid.UUID = Field(nullable=False, index=True)
    blocker_task_id: uuid.UUID = Field(foreign_key="tasks.id", nullable=False, index=True)
    blocked_task_id: uuid.UUID = Field(foreign_key="tasks.id", nullable=False, index=True)
    type: str = Field(nullable=False, default="blocks")
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
