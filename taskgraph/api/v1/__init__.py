"""
API v1 Router

All tenant-scoped endpoints are prefixed with /tenants/{tenant_id}.
"""

from fastapi import APIRouter

from . import dependencies, projects, tasks

router = APIRouter()

router.include_router(tasks.router, prefix="/tenants/{tenant_id}/tasks", tags=["Tasks"])
router.include_router(projects.router, prefix="/tenants/{tenant_id}/projects", tags=["Projects"])
router.include_router(
    dependencies.router, prefix="/tenants/{tenant_id}/dependencies", tags=["Dependencies"]
)


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/tenants/{tenant_id}/tasks/{task_id}/status",
            "/tenants/{tenant_id}/tasks/whats-next",
            "/tenants/{tenant_id}/projects/{project_id}/dependency-graph",
            "/tenants/{tenant_id}/dependencies",
        ],
    }
