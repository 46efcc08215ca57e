"""
Status Server
=============

Optional FastAPI application exposing channel health.

Endpoints:
    GET  /          - Service information
    GET  /health    - Liveness probe (is process alive?)
    GET  /ready     - Readiness probe (is at least one channel running?)
    GET  /channels  - Per-channel state and metrics

The app's lifespan starts the orchestrator on startup and stops it on
shutdown, so `uvicorn.run(app)` is all that is needed to run the channels
with the status API alongside.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from udp_video_stream.config import Settings
from udp_video_stream.orchestrator import StreamOrchestrator


logger = logging.getLogger(__name__)


def create_app(
    orchestrator: StreamOrchestrator,
    settings: Settings,
    manage_lifecycle: bool = True,
) -> FastAPI:
    """
    Build the status application.

    Args:
        orchestrator: Orchestrator whose channels are reported
        settings: Loaded settings (service name and version)
        manage_lifecycle: Start/stop the orchestrator with the app

    Returns:
        FastAPI application
    """
    startup_time = time.time()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan manager with graceful shutdown."""
        nonlocal startup_time
        startup_time = time.time()

        if manage_lifecycle and not orchestrator.started:
            logger.info(f"Starting {settings.service.name} {settings.service.version}")
            orchestrator.start()

        yield

        if manage_lifecycle:
            logger.info("Shutting down gracefully...")
            orchestrator.stop()
            logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.service.name,
        description="UDP video streaming channel status",
        version=settings.service.version,
        lifespan=lifespan,
    )

    @app.get("/")
    async def root() -> JSONResponse:
        """Service information endpoint."""
        return JSONResponse({
            "service": settings.service.name,
            "version": settings.service.version,
            "status": "running",
            "channels": len(orchestrator.channels),
        })

    @app.get("/health")
    async def health() -> JSONResponse:
        """
        Liveness probe - is the process alive?

        Always returns 200 if the service is running.
        """
        return JSONResponse({
            "status": "healthy",
            "uptime_seconds": round(time.time() - startup_time, 1),
        })

    @app.get("/ready")
    async def ready() -> JSONResponse:
        """
        Readiness probe - is at least one channel running?

        Returns 503 when every channel is still starting, failed or stopped.
        """
        running = [c.name for c in orchestrator.running_channels()]
        failed = [c.name for c in orchestrator.failed_channels()]

        if running:
            return JSONResponse({
                "status": "ready",
                "running": running,
                "failed": failed,
            })
        return JSONResponse(
            {
                "status": "not_ready",
                "running": running,
                "failed": failed,
            },
            status_code=503,
        )

    @app.get("/channels")
    async def channels() -> JSONResponse:
        """Per-channel state and metrics."""
        return JSONResponse({"channels": orchestrator.status()})

    return app
