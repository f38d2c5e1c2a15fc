"""Project endpoints: dependency graph layout."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskgraph.core.auth import Actor, require_actor
from taskgraph.core.database import get_session
from taskgraph.services.layout import compute_layout
from taskgraph.services.store import SqlEdgeSource, SqlTaskStore
from taskgraph_shared.schemas.graph import GraphLayout

router = APIRouter()


@router.get("/{project_id}/dependency-graph", response_model=GraphLayout)
async def dependency_graph_endpoint(
    tenant_id: uuid.UUID,
    project_id: uuid.UUID,
    auth: Actor = Depends(require_actor),
    session: AsyncSession = Depends(get_session),
):
    """Layered layout of a project's dependency graph for visualization."""
    return await compute_layout(
        SqlTaskStore(session),
        SqlEdgeSource(session),
        project_id,
        auth.tenant_id,
    )
