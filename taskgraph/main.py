"""
Task Graph API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI

from taskgraph.api.v1 import router as api_v1_router
from taskgraph.core.config import get_settings
from taskgraph.core.database import init_db
from taskgraph.core.logging import configure_logging
from taskgraph.core.redis import close_redis, redis_available

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Task Graph",
        description="Task dependency graph, completion cascades and what's-next ranking.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint for startup probes."""
        if settings.notifications_enabled and not await redis_available():
            return {"status": "degraded", "redis": False}
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("taskgraph.starting", notifications=settings.notifications_enabled)
        if settings.debug:
            await init_db()

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("taskgraph.shutting_down")
        await close_redis()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
