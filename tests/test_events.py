"""
Tests for the audit and notification sinks.
"""

import json
import uuid
from unittest.mock import AsyncMock

import pytest

from taskgraph.core import events
from taskgraph.core.events import NullNotifier, RedisNotifier, get_notifier
from taskgraph_shared.schemas.tasks import AuditRecord


@pytest.fixture
def fake_redis(monkeypatch):
    client = AsyncMock()
    client.publish.return_value = 1
    monkeypatch.setattr(events, "get_redis", AsyncMock(return_value=client))
    return client


def _record(action: str, **diff) -> AuditRecord:
    return AuditRecord(
        tenant_id=uuid.uuid4(),
        entity_type="task",
        entity_id=uuid.uuid4(),
        action=action,
        diff=diff,
        actor_type="system" if action == "auto_unblocked" else "human",
    )


class TestRedisNotifier:
    """Event payloads published to Redis."""

    async def test_status_change_published_as_transitioned(self, fake_redis):
        """Status changes go out as task.transitioned."""
        entry = _record("status_changed", old="ready", new="in_progress")
        await RedisNotifier(channel="test:tasks").publish(entry)

        channel, payload = fake_redis.publish.await_args.args
        assert channel == "test:tasks"
        data = json.loads(payload)
        assert data["type"] == "task.transitioned"
        assert data["task_id"] == str(entry.entity_id)
        assert data["actor_id"] is None
        assert data["payload"] == {"old": "ready", "new": "in_progress"}

    async def test_auto_unblock_event_type(self, fake_redis):
        """Cascade releases go out as task.auto_unblocked."""
        await RedisNotifier(channel="test:tasks").publish(_record("auto_unblocked"))
        data = json.loads(fake_redis.publish.await_args.args[1])
        assert data["type"] == "task.auto_unblocked"
        assert data["actor_type"] == "system"

    async def test_default_channel_from_settings(self, fake_redis):
        """Without an explicit channel the configured one is used."""
        await RedisNotifier().publish(_record("status_changed"))
        assert fake_redis.publish.await_args.args[0] == "tg:tasks:pubsub"


def test_notifier_follows_settings(monkeypatch):
    """get_notifier honours notifications_enabled."""
    settings = events.get_settings()
    monkeypatch.setattr(settings, "notifications_enabled", False)
    assert isinstance(get_notifier(), NullNotifier)
    monkeypatch.setattr(settings, "notifications_enabled", True)
    assert isinstance(get_notifier(), RedisNotifier)
