"""Dependency endpoints: list, add (with cycle detection), remove."""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskgraph.core.auth import Actor, require_actor
from taskgraph.core.database import get_session
from taskgraph.services.dependencies import (
    add_dependency,
    list_dependencies,
    remove_dependency,
)
from taskgraph_shared.schemas.tasks import DependencyAdd, DependencyRead

router = APIRouter()


@router.get("/task/{task_id}", response_model=List[DependencyRead])
async def list_dependencies_endpoint(
    tenant_id: uuid.UUID,
    task_id: uuid.UUID,
    auth: Actor = Depends(require_actor),
    session: AsyncSession = Depends(get_session),
):
    """Edges where the task is either blocker or blocked."""
    return await list_dependencies(session, auth.tenant_id, task_id)


@router.post("/", response_model=DependencyRead, status_code=201)
async def add_dependency_endpoint(
    tenant_id: uuid.UUID,
    body: DependencyAdd,
    auth: Actor = Depends(require_actor),
    session: AsyncSession = Depends(get_session),
):
    """Add a dependency. Rejects self, duplicate and circular dependencies with 409."""
    return await add_dependency(
        session,
        auth.tenant_id,
        body.blocker_task_id,
        body.blocked_task_id,
        body.type,
    )


@router.delete("/{dependency_id}", status_code=204)
async def remove_dependency_endpoint(
    tenant_id: uuid.UUID,
    dependency_id: uuid.UUID,
    auth: Actor = Depends(require_actor),
    session: AsyncSession = Depends(get_session),
):
    await remove_dependency(session, auth.tenant_id, dependency_id)
    return Response(status_code=204)
