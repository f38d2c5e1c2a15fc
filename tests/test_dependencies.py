"""
Tests for dependency edge management.

Tests cover:
- Adding edges, including the is_blocked_by orientation
- Self, duplicate and circular dependency rejection (BFS)
- Tenant scoping on add / remove / list
"""

from __future__ import annotations

import uuid

import pytest

from taskgraph.core.errors import DependencyConflict, NotFound
from taskgraph.services.dependencies import (
    add_dependency,
    list_dependencies,
    remove_dependency,
)
from taskgraph_shared.schemas.common import DependencyType


class TestAddDependency:
    """Write-time checks on new edges."""

    async def test_add(self, session, tenant_id, make_task):
        """A blocks edge is stored as given."""
        a = await make_task("A")
        b = await make_task("B")
        dep = await add_dependency(session, tenant_id, a.id, b.id)
        assert dep.blocker_task_id == a.id
        assert dep.blocked_task_id == b.id
        assert dep.type == "blocks"

    async def test_is_blocked_by_is_stored_as_blocks(self, session, tenant_id, make_task):
        """is_blocked_by is stored as blocks with endpoints swapped."""
        a = await make_task("A")
        b = await make_task("B")
        dep = await add_dependency(session, tenant_id, b.id, a.id, DependencyType.IS_BLOCKED_BY)
        assert (dep.blocker_task_id, dep.blocked_task_id) == (a.id, b.id)
        assert dep.type == "blocks"

    async def test_self_dependency_rejected(self, session, tenant_id, make_task):
        """A task cannot depend on itself."""
        a = await make_task("A")
        with pytest.raises(DependencyConflict):
            await add_dependency(session, tenant_id, a.id, a.id)

    async def test_duplicate_rejected(self, session, tenant_id, make_task):
        """The same edge cannot be added twice."""
        a = await make_task("A")
        b = await make_task("B")
        await add_dependency(session, tenant_id, a.id, b.id)
        with pytest.raises(DependencyConflict):
            await add_dependency(session, tenant_id, a.id, b.id)

    async def test_direct_cycle_rejected(self, session, tenant_id, make_task):
        """B -> A is refused once A -> B exists."""
        a = await make_task("A")
        b = await make_task("B")
        await add_dependency(session, tenant_id, a.id, b.id)
        with pytest.raises(DependencyConflict) as exc:
            await add_dependency(session, tenant_id, b.id, a.id)
        assert "circular" in exc.value.detail

    async def test_indirect_cycle_rejected(self, session, tenant_id, make_task):
        """Longer cycles are found by the search too."""
        a, b, c = [await make_task(n) for n in "ABC"]
        await add_dependency(session, tenant_id, a.id, b.id)
        await add_dependency(session, tenant_id, b.id, c.id)
        with pytest.raises(DependencyConflict):
            await add_dependency(session, tenant_id, c.id, a.id)

    async def test_diamond_allowed(self, session, tenant_id, make_task):
        """Converging paths are not cycles."""
        a, b, c, d = [await make_task(n) for n in "ABCD"]
        await add_dependency(session, tenant_id, a.id, b.id)
        await add_dependency(session, tenant_id, a.id, c.id)
        await add_dependency(session, tenant_id, b.id, d.id)
        await add_dependency(session, tenant_id, c.id, d.id)
        assert len(await list_dependencies(session, tenant_id, d.id)) == 2

    async def test_cross_tenant_endpoint_not_found(self, session, tenant_id, make_task):
        """Endpoints must live in the caller's tenant."""
        a = await make_task("A")
        foreign = await make_task("Foreign", tenant=uuid.uuid4())
        with pytest.raises(NotFound):
            await add_dependency(session, tenant_id, a.id, foreign.id)


class TestRemoveAndList:
    """Edge removal and listing."""

    async def test_list_covers_both_directions(self, session, tenant_id, make_task):
        """Listing returns edges where the task is either endpoint."""
        a, b, c = [await make_task(n) for n in "ABC"]
        await add_dependency(session, tenant_id, a.id, b.id)
        await add_dependency(session, tenant_id, b.id, c.id)
        assert len(await list_dependencies(session, tenant_id, b.id)) == 2
        assert len(await list_dependencies(session, tenant_id, a.id)) == 1

    async def test_remove(self, session, tenant_id, make_task):
        """A removed edge no longer lists."""
        a = await make_task("A")
        b = await make_task("B")
        dep = await add_dependency(session, tenant_id, a.id, b.id)
        await remove_dependency(session, tenant_id, dep.id)
        assert await list_dependencies(session, tenant_id, a.id) == []

    async def test_remove_other_tenant_not_found(self, session, tenant_id, make_task):
        """Another tenant cannot remove the edge."""
        a = await make_task("A")
        b = await make_task("B")
        dep = await add_dependency(session, tenant_id, a.id, b.id)
        with pytest.raises(NotFound):
            await remove_dependency(session, uuid.uuid4(), dep.id)
