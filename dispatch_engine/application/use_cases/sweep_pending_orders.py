"""SweepPendingOrdersUseCase — assign every confirmed order that still has no worker."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass

from dispatch_engine.application.ports.order_repo import OrderRepository
from dispatch_engine.application.use_cases.assign_worker import (
    AssignmentRequest,
    AssignOptimalWorkerUseCase,
)
from dispatch_engine.domain.errors import AssignmentError
from dispatch_engine.domain.value_objects.enums import Urgency

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Outcome of one order in a sweep."""

    order_id: int
    tracking_id: str
    worker_id: int | None
    error: str | None = None
    retryable: bool = False


class SweepPendingOrdersUseCase:
    """Run the engine once per pending order; one failure never aborts the batch.

    `order_scope` opens the unit of work for a single order: its writes are
    kept when the order succeeds and discarded when it raises.
    """

    def __init__(
        self,
        assign_worker: AssignOptimalWorkerUseCase,
        order_repo: OrderRepository,
        order_scope: Callable[[], AbstractAsyncContextManager] = nullcontext,
    ):
        self._assign = assign_worker
        self._orders = order_repo
        self._order_scope = order_scope

    async def execute(self) -> list[SweepResult]:
        pending = await self._orders.get_confirmed_unassigned()
        logger.info("Sweep: %d confirmed orders awaiting a worker", len(pending))

        results = []
        for order in pending:
            if order.customer_location is None:
                logger.warning("Order %s has no customer location, skipping", order.tracking_id)
                results.append(
                    SweepResult(
                        order_id=order.id,
                        tracking_id=order.tracking_id,
                        worker_id=None,
                        error="Missing customer location",
                    )
                )
                continue

            request = AssignmentRequest(
                order_id=order.id,
                service_id=order.service_id,
                customer_location=order.customer_location,
                urgency=Urgency.MEDIUM,
                scheduled_time=order.scheduled_time,
            )
            try:
                async with self._order_scope():
                    worker = await self._assign.execute(request)
            except AssignmentError as e:
                logger.warning("Order %s not assigned: %s", order.tracking_id, e)
                results.append(
                    SweepResult(
                        order_id=order.id,
                        tracking_id=order.tracking_id,
                        worker_id=None,
                        error=str(e),
                        retryable=e.retryable,
                    )
                )
                continue
            except Exception as e:
                logger.exception("Error assigning order %s", order.tracking_id)
                results.append(
                    SweepResult(
                        order_id=order.id,
                        tracking_id=order.tracking_id,
                        worker_id=None,
                        error=str(e),
                    )
                )
                continue

            if worker is None:
                logger.info("No suitable worker found for order %s", order.tracking_id)
            else:
                logger.info("Order %s assigned to worker %s", order.tracking_id, worker.id)
            results.append(
                SweepResult(
                    order_id=order.id,
                    tracking_id=order.tracking_id,
                    worker_id=worker.id if worker else None,
                )
            )

        assigned = sum(1 for r in results if r.worker_id is not None)
        logger.info("Sweep complete: %d/%d assigned", assigned, len(results))
        return results
