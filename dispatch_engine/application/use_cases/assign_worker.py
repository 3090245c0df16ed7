"""AssignOptimalWorkerUseCase — score available workers and commit the best one."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from dispatch_engine.application.ports.order_repo import OrderRepository
from dispatch_engine.application.ports.service_repo import ServiceRepository
from dispatch_engine.application.ports.worker_repo import WorkerRepository
from dispatch_engine.domain.entities.order import CustomerLocation
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.errors import (
    InvalidAssignmentRequest,
    OrderNotAssignable,
    OrderNotFound,
    ServiceNotFound,
    WorkerClaimConflict,
)
from dispatch_engine.domain.policies.worker_scoring import (
    ACCEPTANCE_THRESHOLD,
    rank_scores,
    score_worker,
)
from dispatch_engine.domain.value_objects.enums import (
    ACTIVE_ORDER_STATUSES,
    Urgency,
    WorkerAvailability,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentRequest:
    order_id: int
    service_id: int
    customer_location: CustomerLocation
    urgency: Urgency = Urgency.MEDIUM
    # Accepted but not used in scoring yet
    scheduled_time: datetime | None = None

    def validate(self) -> None:
        """Raise InvalidAssignmentRequest if the request cannot be processed."""
        loc = self.customer_location
        if loc is None:
            raise InvalidAssignmentRequest("customer_location is required")
        for name, value in (("lat", loc.lat), ("lng", loc.lng)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidAssignmentRequest(f"customer_location.{name} must be a number")
            if not math.isfinite(value):
                raise InvalidAssignmentRequest(f"customer_location.{name} must be finite")
        if not loc.to_geo_point().is_valid():
            raise InvalidAssignmentRequest(
                f"customer_location out of range: ({loc.lat}, {loc.lng})"
            )
        try:
            Urgency(self.urgency)
        except ValueError:
            raise InvalidAssignmentRequest(f"Unknown urgency: {self.urgency!r}") from None


async def commit_assignment(
    workers: WorkerRepository,
    orders: OrderRepository,
    order_id: int,
    worker_id: int,
    description: str,
) -> None:
    """Claim the worker, then assign the order; undo the claim if the order write fails.

    Raises:
        WorkerClaimConflict: the worker was no longer available (retryable).
        OrderNotFound: the order disappeared before the write.
        OrderNotAssignable: the order is no longer confirmed/unassigned.
    """
    if not await workers.claim(worker_id):
        raise WorkerClaimConflict(worker_id)

    try:
        updated = await orders.assign(
            order_id, worker_id, datetime.now(timezone.utc), description
        )
    except Exception:
        logger.exception(
            "Order %s write failed, releasing worker %s", order_id, worker_id
        )
        try:
            await workers.release(worker_id)
        except Exception:
            # the order write error propagates, not this one
            logger.exception("Releasing worker %s failed", worker_id)
        raise

    if updated is None:
        await workers.release(worker_id)
        current = await orders.get_by_id(order_id)
        if current is None:
            raise OrderNotFound(order_id)
        raise OrderNotAssignable(order_id, current.status.value)


class AssignOptimalWorkerUseCase:
    """Pick the best available worker for an order and commit the pairing."""

    def __init__(
        self,
        service_repo: ServiceRepository,
        worker_repo: WorkerRepository,
        order_repo: OrderRepository,
    ):
        self._services = service_repo
        self._workers = worker_repo
        self._orders = order_repo

    async def execute(self, request: AssignmentRequest) -> Worker | None:
        """Assign the optimal worker to the requested order.

        Pipeline:
        1. Validate the request (before touching storage)
        2. Resolve the service
        3. Fetch available workers (category used as a pre-filter hint)
        4. Score every candidate
        5. Rank by score, ties to the lower worker id
        6. Reject if the best score is under the acceptance threshold
        7. Claim the worker and assign the order

        Returns:
            The chosen worker, or None when nobody is available or suitable.
        """
        request.validate()

        service = await self._services.get_by_id(request.service_id)
        if service is None:
            raise ServiceNotFound(request.service_id)

        candidates = await self._workers.get_available(service.category.value)
        if not candidates:
            logger.info("Order %s: no available workers", request.order_id)
            return None

        customer_point = request.customer_location.to_geo_point()
        scores = []
        for worker in candidates:
            active = await self._active_order_count(worker.id)
            scores.append(score_worker(worker, service, customer_point, active))

        ranked = rank_scores(scores)
        best = ranked[0]
        if not best.is_acceptable():
            logger.info(
                "Order %s: best score %.3f (worker %s) below threshold %.2f",
                request.order_id, best.score, best.worker_id, ACCEPTANCE_THRESHOLD,
            )
            return None

        chosen = next(w for w in candidates if w.id == best.worker_id)
        await commit_assignment(
            self._workers,
            self._orders,
            request.order_id,
            chosen.id,
            f"Order assigned to worker ({best.breakdown})",
        )
        chosen.availability = WorkerAvailability.BUSY

        logger.info(
            "Order %s → Worker %s (urgency=%s, %s)",
            request.order_id, chosen.employee_id, Urgency(request.urgency).value, best.breakdown,
        )
        return chosen

    async def _active_order_count(self, worker_id: int) -> int:
        orders = await self._orders.get_by_worker(worker_id)
        return sum(1 for o in orders if o.status in ACTIVE_ORDER_STATUSES)
