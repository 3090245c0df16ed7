"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from dispatch_engine.config import settings
from dispatch_engine.infrastructure.api.dependencies import get_repositories
from dispatch_engine.infrastructure.storage import Repositories

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(repos: Repositories = Depends(get_repositories)):
    """Check API and storage connectivity."""
    if repos.session is None:
        db_status = "in-memory"
    else:
        try:
            result = await repos.session.execute(text("SELECT 1"))
            result.scalar()
            db_status = "connected"
        except Exception as e:
            db_status = f"error: {e}"

    return {
        "status": "ok" if db_status in ("connected", "in-memory") else "degraded",
        "storage_backend": settings.storage_backend,
        "database": db_status,
        "service": "Dispatch Engine - order to worker assignment",
    }
