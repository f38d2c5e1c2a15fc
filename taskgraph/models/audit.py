"""Audit log model (tenant-scoped, append-only)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class AuditLog(UUIDMixin, SQLModel, table=True):
    __tablename__ = "audit_log"
    __table_args__ = (
        sa.Index("audit_log_tenant_entity_idx", "tenant_id", "entity_type", "entity_id"),
    )

    tenant_id: uuid.UUID = Field(nullable=False)
    entity_type: str = Field(nullable=False)  # e.g. task
    entity_id: uuid.UUID = Field(nullable=False)
    action: str = Field(nullable=False)  # e.g. status_changed, auto_unblocked
    actor_id: Optional[uuid.UUID] = None
    actor_type: str = Field(nullable=False, default="human")  # human | system
    diff: dict = Field(
        default_factory=dict,
        sa_type=sa.JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
