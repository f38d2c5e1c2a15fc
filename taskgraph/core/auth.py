"""
Caller identity for tenant-scoped routes.

Authentication happens upstream (gateway / auth service); by the time a request
reaches this service the tenant is in the path and the user in ``X-User-Id``.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Header, HTTPException


class Actor:
    """Container for the calling user + their tenant context."""

    def __init__(self, tenant_id: uuid.UUID, user_id: Optional[uuid.UUID], actor_type: str = "human"):
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.actor_type = actor_type

    @classmethod
    def system(cls, tenant_id: uuid.UUID) -> "Actor":
        return cls(tenant_id=tenant_id, user_id=None, actor_type="system")


async def require_actor(
    tenant_id: uuid.UUID,
    x_user_id: Optional[str] = Header(default=None),
) -> Actor:
    """FastAPI dependency: resolve the acting user for a tenant-scoped route."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Malformed X-User-Id header")
    return Actor(tenant_id=tenant_id, user_id=user_id)
