"""Dispatch Engine — FastAPI application factory."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dispatch_engine.adapters.persistence.database import engine
from dispatch_engine.config import settings
from dispatch_engine.infrastructure.api.routes_assignments import router as assignments_router
from dispatch_engine.infrastructure.api.routes_health import router as health_router
from dispatch_engine.infrastructure.api.routes_workers import router as workers_router
from dispatch_engine.infrastructure.scheduler import sweep_forever

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    if settings.storage_backend == "postgres":
        try:
            async with engine.begin():
                pass  # Connection pool warmed up
            logger.info("Database connection established")
        except Exception as e:
            logger.warning("Database not available on startup: %s", e)

    sweep_task = None
    if settings.sweep_enabled:
        sweep_task = asyncio.create_task(sweep_forever(settings.sweep_interval_seconds))

    yield

    if sweep_task is not None:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    app = FastAPI(
        title="Dispatch Engine",
        description="Order-to-worker assignment for on-demand home services",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5000",
            "http://127.0.0.1:5000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(assignments_router, prefix="/api")
    app.include_router(workers_router, prefix="/api")

    return app


app = create_app()
