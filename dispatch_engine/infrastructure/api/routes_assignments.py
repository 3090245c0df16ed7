"""Assignment endpoints — interactive assignment, sweep trigger, manual pick."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from dispatch_engine.application.use_cases.assign_worker import (
    AssignmentRequest,
    AssignOptimalWorkerUseCase,
)
from dispatch_engine.application.use_cases.manual_assign import ManualAssignWorkerUseCase
from dispatch_engine.application.use_cases.sweep_pending_orders import (
    SweepPendingOrdersUseCase,
)
from dispatch_engine.domain.entities.order import CustomerLocation
from dispatch_engine.domain.errors import AssignmentError
from dispatch_engine.domain.value_objects.enums import Urgency
from dispatch_engine.infrastructure.api.dependencies import (
    get_assign_worker_uc,
    get_manual_assign_uc,
    get_repositories,
    get_sweep_uc,
)
from dispatch_engine.infrastructure.api.errors import to_http_exception
from dispatch_engine.infrastructure.api.routes_workers import serialize_worker
from dispatch_engine.infrastructure.storage import Repositories

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assignments"])


class CustomerLocationBody(BaseModel):
    lat: float
    lng: float
    address: str = ""


class AssignmentBody(BaseModel):
    order_id: int
    service_id: int
    customer_location: CustomerLocationBody
    urgency: Urgency = Urgency.MEDIUM
    scheduled_time: datetime | None = None


class ManualAssignmentBody(BaseModel):
    worker_id: int


@router.post("/assignments")
async def assign_order(
    body: AssignmentBody,
    assign_uc: AssignOptimalWorkerUseCase = Depends(get_assign_worker_uc),
    repos: Repositories = Depends(get_repositories),
):
    """Assign the best available worker to a freshly confirmed order."""
    request = AssignmentRequest(
        order_id=body.order_id,
        service_id=body.service_id,
        customer_location=CustomerLocation(
            lat=body.customer_location.lat,
            lng=body.customer_location.lng,
            address=body.customer_location.address,
        ),
        urgency=body.urgency,
        scheduled_time=body.scheduled_time,
    )
    try:
        worker = await assign_uc.execute(request)
    except AssignmentError as e:
        logger.warning("Assignment for order %s failed: %s", body.order_id, e)
        raise to_http_exception(e)

    await repos.commit()

    if worker is None:
        # Order stays confirmed; the next sweep retries it
        return {"status": "unassigned", "order_id": body.order_id, "worker": None}
    return {"status": "assigned", "order_id": body.order_id, "worker": serialize_worker(worker)}


@router.post("/assignments/sweep")
async def run_sweep(
    sweep_uc: SweepPendingOrdersUseCase = Depends(get_sweep_uc),
    repos: Repositories = Depends(get_repositories),
):
    """Assign every confirmed order that has no worker yet."""
    results = await sweep_uc.execute()
    await repos.commit()

    return {
        "status": "ok",
        "total_processed": len(results),
        "assigned": sum(1 for r in results if r.worker_id is not None),
        "failed": sum(1 for r in results if r.error is not None),
        "results": [
            {
                "order_id": r.order_id,
                "tracking_id": r.tracking_id,
                "worker_id": r.worker_id,
                "error": r.error,
                "retryable": r.retryable,
            }
            for r in results
        ],
    }


@router.post("/orders/{order_id}/assign")
async def assign_order_manually(
    order_id: int,
    body: ManualAssignmentBody,
    manual_uc: ManualAssignWorkerUseCase = Depends(get_manual_assign_uc),
    repos: Repositories = Depends(get_repositories),
):
    """Operator override: put a specific worker on an order."""
    try:
        worker = await manual_uc.execute(order_id, body.worker_id)
    except AssignmentError as e:
        raise to_http_exception(e)

    await repos.commit()
    return {"status": "assigned", "order_id": order_id, "worker": serialize_worker(worker)}


@router.get("/orders/{order_id}")
async def get_order(order_id: int, repos: Repositories = Depends(get_repositories)):
    order = await repos.orders.get_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    loc = order.customer_location
    return {
        "id": order.id,
        "tracking_id": order.tracking_id,
        "service_id": order.service_id,
        "status": order.status.value,
        "worker_id": order.worker_id,
        "customer_location": (
            {"lat": loc.lat, "lng": loc.lng, "address": loc.address} if loc else None
        ),
        "scheduled_time": order.scheduled_time.isoformat() if order.scheduled_time else None,
        "assigned_at": order.assigned_at.isoformat() if order.assigned_at else None,
        "timeline": [
            {
                "status": e.status.value,
                "timestamp": e.timestamp.isoformat(),
                "description": e.description,
            }
            for e in order.timeline
        ],
    }
