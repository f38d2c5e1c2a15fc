"""Task-related Pydantic schemas for shared use across server and frontend codegen."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .common import DependencyType, TaskPriority, TaskStatus


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------


class TaskRead(BaseModel):
    id: UUID
    tenant_id: UUID
    project_id: UUID
    parent_task_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assignee_id: Optional[UUID] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


class TaskTransition(BaseModel):
    """Request body for POST /tasks/{taskId}/status."""
    status: TaskStatus


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class DependencyAdd(BaseModel):
    """Request body for POST /dependencies."""
    blocker_task_id: UUID
    blocked_task_id: UUID
    type: DependencyType = DependencyType.BLOCKS


class DependencyRead(BaseModel):
    id: UUID
    tenant_id: UUID
    blocker_task_id: UUID
    blocked_task_id: UUID
    type: str
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


class AuditRecord(BaseModel):
    tenant_id: UUID
    entity_type: str
    entity_id: UUID
    action: str
    diff: Dict[str, Any] = Field(default_factory=dict)
    actor_id: Optional[UUID] = None
    actor_type: str = "human"  # human | system


# ---------------------------------------------------------------------------
# What's next
# ---------------------------------------------------------------------------


class WhatsNextItem(BaseModel):
    task: TaskRead
    reason: str


class WhatsNextRead(BaseModel):
    user_id: UUID
    items: List[WhatsNextItem] = Field(default_factory=list)
