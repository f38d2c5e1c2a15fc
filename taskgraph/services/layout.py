"""
Dependency graph layout for a project's dependency view.

Connected tasks (endpoint of at least one in-scope edge) are layered with a
Kahn-style pass: roots seed layer 0 and every popped task pushes each
neighbour to ``max(neighbour layer, popped layer + 1)``. Tasks a cycle keeps
from ever being popped all land on ``max assigned layer + 1`` once the queue
drains, so cyclic data still terminates with a layer for every node. Within
a layer, rows follow the order the pass first reached each task.

Tasks without in-scope edges go into a fixed-width grid below the layers.
Purely a read: nothing here changes task state.
"""

from __future__ import annotations

import uuid
from collections import deque
from typing import Optional, Sequence

from taskgraph.core.config import Settings, get_settings
from taskgraph.models.task import Task
from taskgraph.services.graph import DependencyGraph
from taskgraph.services.store import Edge, EdgeSource, TaskStore
from taskgraph_shared.schemas.graph import GraphLayout, GridCell, LayoutEdge, LayoutNode


def assign_layers(nodes: Sequence[uuid.UUID], edges: Sequence[Edge]) -> dict[uuid.UUID, int]:
    """Layer index per node, in the order the pass first assigned each one a layer."""
    adjacency: dict[uuid.UUID, list[uuid.UUID]] = {n: [] for n in nodes}
    in_degree: dict[uuid.UUID, int] = {n: 0 for n in nodes}
    for edge in edges:
        adjacency[edge.blocker_task_id].append(edge.blocked_task_id)
        in_degree[edge.blocked_task_id] += 1

    layers: dict[uuid.UUID, int] = {}
    queue: deque[uuid.UUID] = deque()
    for node in nodes:
        if in_degree[node] == 0:
            layers[node] = 0
            queue.append(node)

    popped: set[uuid.UUID] = set()
    while queue:
        current = queue.popleft()
        popped.add(current)
        current_layer = layers[current]
        for neighbor in adjacency[current]:
            layers[neighbor] = max(layers.get(neighbor, 0), current_layer + 1)
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    # Cycle members (and anything downstream of one) were never popped.
    stuck = [n for n in nodes if n not in popped]
    if stuck:
        fallback = max(layers.values(), default=0) + 1
        for node in stuck:
            layers[node] = fallback

    return layers


def build_layout(
    project_id: uuid.UUID,
    tasks: Sequence[Task],
    graph: DependencyGraph,
    settings: Optional[Settings] = None,
) -> GraphLayout:
    """Lay out ``tasks`` using the edges of ``graph`` that stay inside the task set."""
    settings = settings or get_settings()
    task_ids = [t.id for t in tasks]
    in_project = set(task_ids)

    scoped_edges = [
        e for e in graph.edges
        if e.blocker_task_id in in_project and e.blocked_task_id in in_project
    ]

    # Edge endpoints, first appearance first.
    connected: list[uuid.UUID] = []
    seen: set[uuid.UUID] = set()
    for edge in scoped_edges:
        for endpoint in (edge.blocker_task_id, edge.blocked_task_id):
            if endpoint not in seen:
                seen.add(endpoint)
                connected.append(endpoint)
    standalone = [tid for tid in task_ids if tid not in seen]

    layers = assign_layers(connected, scoped_edges)

    nodes: list[LayoutNode] = []
    rows_per_layer: dict[int, int] = {}
    # Rows follow the order the layering pass first reached each task.
    for task_id in layers:
        layer = layers[task_id]
        row = rows_per_layer.get(layer, 0)
        rows_per_layer[layer] = row + 1
        nodes.append(
            LayoutNode(
                task_id=task_id,
                layer=layer,
                row=row,
                x=settings.layout_padding + layer * settings.layout_layer_gap_x,
                y=settings.layout_padding + row * settings.layout_node_gap_y,
            )
        )
    nodes.sort(key=lambda n: (n.layer, n.row))

    num_layers = max(rows_per_layer, default=-1) + 1
    max_rows = max(rows_per_layer.values(), default=0)
    connected_height = max_rows * settings.layout_node_gap_y
    grid_top = settings.layout_padding + connected_height
    if connected_height:
        grid_top += settings.layout_node_gap_y

    columns = max(1, settings.layout_grid_columns)
    cells = [
        GridCell(
            task_id=task_id,
            column=idx % columns,
            row=idx // columns,
            x=settings.layout_padding + (idx % columns) * settings.layout_grid_gap_x,
            y=grid_top + (idx // columns) * settings.layout_grid_gap_y,
        )
        for idx, task_id in enumerate(standalone)
    ]
    grid_rows = -(-len(standalone) // columns)

    width = settings.layout_padding * 2 + max(
        num_layers * settings.layout_layer_gap_x,
        min(len(standalone), columns) * settings.layout_grid_gap_x,
    )
    height = grid_top + grid_rows * settings.layout_grid_gap_y + settings.layout_padding

    return GraphLayout(
        project_id=project_id,
        layers=nodes,
        standalone=cells,
        edges=[
            LayoutEdge(
                blocker_task_id=e.blocker_task_id,
                blocked_task_id=e.blocked_task_id,
                type=e.type,
            )
            for e in scoped_edges
        ],
        width=max(width, settings.layout_min_width),
        height=max(height, settings.layout_min_height),
    )


async def compute_layout(
    store: TaskStore,
    edges: EdgeSource,
    project_id: uuid.UUID,
    tenant_id: uuid.UUID,
    settings: Optional[Settings] = None,
) -> GraphLayout:
    """Load a project's tasks and edges and lay them out. ``NotFound`` for an unknown project."""
    await store.get_project(project_id, tenant_id)
    tasks = await store.list_by_project(project_id, tenant_id)
    graph = await DependencyGraph.load(edges, tenant_id, [t.id for t in tasks])
    return build_layout(project_id, tasks, graph, settings)
