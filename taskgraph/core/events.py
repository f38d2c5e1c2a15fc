"""
Audit and notification sinks for task transitions.

Both are fire-and-forget from the engine's point of view: the transition
engine calls them after a status change has been persisted and logs (never
raises) when they fail.

- ``SqlAuditSink`` appends to the ``audit_log`` table.
- ``RedisNotifier`` publishes the record as a ``task.*`` event on a Redis
  Pub/Sub channel so dashboards can refresh without polling.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskgraph.core.config import get_settings
from taskgraph.core.redis import get_redis
from taskgraph.models.audit import AuditLog
from taskgraph_shared.schemas.tasks import AuditRecord

log = structlog.get_logger()

# audit action -> published event type
EVENT_TYPES = {
    "status_changed": "task.transitioned",
    "auto_unblocked": "task.auto_unblocked",
}


class AuditSink(Protocol):
    async def record(self, entry: AuditRecord) -> None: ...


class Notifier(Protocol):
    async def publish(self, entry: AuditRecord) -> None: ...


class SqlAuditSink:
    """Persist audit records in the caller's session.

    Runs after the task store has committed the status change, so rolling
    back a failed audit insert never touches the transition itself.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def record(self, entry: AuditRecord) -> None:
        self._session.add(
            AuditLog(
                tenant_id=entry.tenant_id,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                action=entry.action,
                actor_id=entry.actor_id,
                actor_type=entry.actor_type,
                diff=entry.diff,
            )
        )
        try:
            await self._session.commit()
        except SQLAlchemyError:
            await self._session.rollback()
            raise


class RedisNotifier:
    """Publish transition records to Redis Pub/Sub."""

    def __init__(self, channel: str | None = None):
        self._channel = channel or get_settings().notifications_channel

    async def publish(self, entry: AuditRecord) -> None:
        event_data = {
            "type": EVENT_TYPES.get(entry.action, f"task.{entry.action}"),
            "tenant_id": str(entry.tenant_id),
            "task_id": str(entry.entity_id),
            "actor_id": str(entry.actor_id) if entry.actor_id else None,
            "actor_type": entry.actor_type,
            "payload": entry.diff,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        redis = await get_redis()
        receivers = await redis.publish(self._channel, json.dumps(event_data))
        log.debug("notify.published", channel=self._channel, type=event_data["type"], receivers=receivers)


class NullNotifier:
    """Used when notifications are disabled in settings."""

    async def publish(self, entry: AuditRecord) -> None:
        return None


def get_notifier() -> Notifier:
    """FastAPI dependency selecting the configured notifier."""
    if get_settings().notifications_enabled:
        return RedisNotifier()
    return NullNotifier()
