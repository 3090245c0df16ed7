"""Worker endpoints — candidate listing, location and availability updates."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import ServiceCategory, WorkerAvailability
from dispatch_engine.domain.value_objects.geo_point import GeoPoint
from dispatch_engine.infrastructure.api.dependencies import get_repositories
from dispatch_engine.infrastructure.storage import Repositories

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workers", tags=["workers"])


class LocationUpdate(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class AvailabilityUpdate(BaseModel):
    availability: WorkerAvailability


@router.get("/available")
async def list_available_workers(
    category: ServiceCategory | None = None,
    repos: Repositories = Depends(get_repositories),
):
    """Workers the engine would currently consider as candidates."""
    workers = await repos.workers.get_available(category.value if category else None)
    return {"total": len(workers), "workers": [serialize_worker(w) for w in workers]}


@router.patch("/{worker_id}/location")
async def update_location(
    worker_id: int,
    body: LocationUpdate,
    repos: Repositories = Depends(get_repositories),
):
    worker = await repos.workers.update_location(
        worker_id, GeoPoint(latitude=body.lat, longitude=body.lng)
    )
    if worker is None:
        raise HTTPException(status_code=404, detail="Worker not found")
    await repos.commit()
    return serialize_worker(worker)


@router.patch("/{worker_id}/availability")
async def update_availability(
    worker_id: int,
    body: AvailabilityUpdate,
    repos: Repositories = Depends(get_repositories),
):
    worker = await repos.workers.set_availability(worker_id, body.availability)
    if worker is None:
        raise HTTPException(status_code=404, detail="Worker not found")
    await repos.commit()
    logger.info("Worker %s availability → %s", worker.employee_id, body.availability.value)
    return serialize_worker(worker)


def serialize_worker(w: Worker) -> dict:
    return {
        "id": w.id,
        "employee_id": w.employee_id,
        "specializations": sorted(w.specializations),
        "availability": w.availability.value,
        "lat": w.location.latitude if w.location else None,
        "lng": w.location.longitude if w.location else None,
        "average_rating": w.average_rating,
        "last_location_update": (
            w.last_location_update.isoformat() if w.last_location_update else None
        ),
    }
