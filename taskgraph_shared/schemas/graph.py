"""Dependency graph layout schemas (what the dependency view draws)."""

from __future__ import annotations

from typing import List
from uuid import UUID

from pydantic import BaseModel, Field


class LayoutNode(BaseModel):
    """A connected task placed in a layer column."""
    task_id: UUID
    layer: int
    row: int
    x: int
    y: int


class GridCell(BaseModel):
    """A task with no in-scope edges, placed in the standalone grid."""
    task_id: UUID
    column: int
    row: int
    x: int
    y: int


class LayoutEdge(BaseModel):
    blocker_task_id: UUID
    blocked_task_id: UUID
    type: str = "blocks"


class GraphLayout(BaseModel):
    project_id: UUID
    layers: List[LayoutNode] = Field(default_factory=list)
    standalone: List[GridCell] = Field(default_factory=list)
    edges: List[LayoutEdge] = Field(default_factory=list)
    width: int = 0
    height: int = 0

    def layer_of(self, task_id) -> int | None:
        for node in self.layers:
            if node.task_id == task_id:
                return node.layer
        return None
