"""
Dependency graph queries over one tenant's blocker -> blocked edges.

The graph is an immutable snapshot indexed by both endpoints. Edges that
cannot take part in queries (self-loops, edges owned by another tenant,
duplicates) are logged and dropped at construction; nothing here raises for
inconsistent or cyclic data.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Iterable, Mapping, Optional

import structlog

from taskgraph.core.errors import InvalidEdge
from taskgraph.services.store import Edge, EdgeSource
from taskgraph_shared.schemas.common import DependencyType, TaskStatus

log = structlog.get_logger()


def validate_edge(edge: Edge, tenant_id: uuid.UUID) -> Edge:
    """Return the edge in canonical ``blocks`` form or raise ``InvalidEdge``."""
    if edge.tenant_id != tenant_id:
        raise InvalidEdge("cross_tenant", edge.blocker_task_id, edge.blocked_task_id)
    if edge.blocker_task_id == edge.blocked_task_id:
        raise InvalidEdge("self_loop", edge.blocker_task_id, edge.blocked_task_id)
    if edge.type == DependencyType.IS_BLOCKED_BY.value:
        # Stored from the blocked task's point of view; flip it.
        return edge._replace(
            blocker_task_id=edge.blocked_task_id,
            blocked_task_id=edge.blocker_task_id,
            type=DependencyType.BLOCKS.value,
        )
    if edge.type != DependencyType.BLOCKS.value:
        raise InvalidEdge(f"unknown_type:{edge.type}", edge.blocker_task_id, edge.blocked_task_id)
    return edge


class DependencyGraph:
    def __init__(self, tenant_id: uuid.UUID, edges: Iterable[Edge] = ()):
        self.tenant_id = tenant_id
        self._edges: list[Edge] = []
        self._blockers: dict[uuid.UUID, set[uuid.UUID]] = defaultdict(set)
        self._dependents: dict[uuid.UUID, set[uuid.UUID]] = defaultdict(set)

        for raw in edges:
            try:
                edge = validate_edge(raw, tenant_id)
            except InvalidEdge as exc:
                log.warning(
                    "dependency.invalid_edge",
                    tenant_id=str(tenant_id),
                    reason=exc.reason,
                    blocker_task_id=str(exc.blocker_task_id),
                    blocked_task_id=str(exc.blocked_task_id),
                )
                continue
            if edge.blocked_task_id in self._dependents[edge.blocker_task_id]:
                continue
            self._edges.append(edge)
            self._dependents[edge.blocker_task_id].add(edge.blocked_task_id)
            self._blockers[edge.blocked_task_id].add(edge.blocker_task_id)

    @classmethod
    async def load(
        cls,
        source: EdgeSource,
        tenant_id: uuid.UUID,
        scope_task_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> "DependencyGraph":
        """Build a graph from every edge touching ``scope_task_ids`` (all edges if None)."""
        return cls(tenant_id, await source.list_edges(tenant_id, scope_task_ids))

    @property
    def edges(self) -> list[Edge]:
        """Valid edges in the order the source returned them."""
        return list(self._edges)

    def blockers_of(self, task_id: uuid.UUID) -> set[uuid.UUID]:
        return set(self._blockers.get(task_id, ()))

    def dependents_of(self, task_id: uuid.UUID) -> set[uuid.UUID]:
        return set(self._dependents.get(task_id, ()))

    def is_blocked(self, task_id: uuid.UUID, status_lookup: Mapping[uuid.UUID, TaskStatus]) -> bool:
        """True iff some blocker of ``task_id`` has not completed.

        A blocker missing from ``status_lookup`` lives outside the tenant (or
        was deleted); its edge is treated as invalid and ignored.
        """
        for blocker_id in self._blockers.get(task_id, ()):
            status = status_lookup.get(blocker_id)
            if status is None:
                log.warning(
                    "dependency.blocker_unresolved",
                    tenant_id=str(self.tenant_id),
                    blocker_task_id=str(blocker_id),
                    blocked_task_id=str(task_id),
                )
                continue
            if status != TaskStatus.COMPLETED:
                return True
        return False
