"""
Tests for shared schema helpers.
"""

import uuid

import pytest

from taskgraph_shared.schemas.common import (
    CLOSED_STATUSES,
    PRIORITY_RANK,
    TaskPriority,
    TaskStatus,
    normalize_priority,
    normalize_status,
)
from taskgraph_shared.schemas.graph import GraphLayout, LayoutNode
from taskgraph_shared.schemas.tasks import AuditRecord, DependencyAdd


@pytest.mark.parametrize("raw", [s.value for s in TaskStatus])
def test_known_statuses_round_trip(raw):
    """Every known status maps to itself."""
    assert normalize_status(raw).value == raw


@pytest.mark.parametrize("raw", ["done", "", None, 3])
def test_malformed_status_reads_as_created(raw):
    """Unknown statuses read back as created."""
    assert normalize_status(raw) == TaskStatus.CREATED


def test_malformed_priority_reads_as_medium():
    """Unknown priorities read back as medium."""
    assert normalize_priority("urgent") == TaskPriority.MEDIUM
    assert normalize_priority(TaskPriority.LOW) == TaskPriority.LOW


def test_closed_statuses():
    """Only completed and cancelled count as closed."""
    assert CLOSED_STATUSES == {TaskStatus.COMPLETED, TaskStatus.CANCELLED}
    assert TaskStatus.BLOCKED not in CLOSED_STATUSES


def test_priority_rank_order():
    """Critical ranks first, low last."""
    ranked = sorted(TaskPriority, key=PRIORITY_RANK.__getitem__)
    assert ranked == [TaskPriority.CRITICAL, TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW]


def test_dependency_add_defaults_to_blocks():
    """A dependency body defaults to the blocks type."""
    body = DependencyAdd(blocker_task_id=uuid.uuid4(), blocked_task_id=uuid.uuid4())
    assert body.type.value == "blocks"


def test_audit_record_defaults():
    """Audit records default to a human actor and empty diff."""
    record = AuditRecord(
        tenant_id=uuid.uuid4(), entity_type="task", entity_id=uuid.uuid4(), action="status_changed"
    )
    assert record.diff == {}
    assert record.actor_type == "human"
    assert record.actor_id is None


def test_layout_layer_of():
    """layer_of finds layered tasks and returns None otherwise."""
    a, b = uuid.uuid4(), uuid.uuid4()
    layout = GraphLayout(
        project_id=uuid.uuid4(),
        layers=[LayoutNode(task_id=a, layer=2, row=0, x=480, y=40)],
    )
    assert layout.layer_of(a) == 2
    assert layout.layer_of(b) is None


@pytest.mark.parametrize("value", [uuid.uuid1(), uuid.UUID(int=1), uuid.UUID(int=0)])
def test_ids_accept_any_uuid_version(value):
    """Ids are opaque keys: any UUID version validates."""
    record = AuditRecord(
        tenant_id=value, entity_type="task", entity_id=value, action="status_changed", actor_id=value
    )
    assert record.tenant_id == value
    assert GraphLayout(project_id=value).project_id == value
