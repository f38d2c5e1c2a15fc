"""Project model (tenant-scoped)."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin


class Project(UUIDMixin, TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "projects"

    tenant_id: uuid.UUID = Field(nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = None
