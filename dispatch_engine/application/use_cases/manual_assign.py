"""ManualAssignWorkerUseCase — an operator pins a specific worker to an order."""

from __future__ import annotations

import logging

from dispatch_engine.application.ports.order_repo import OrderRepository
from dispatch_engine.application.ports.worker_repo import WorkerRepository
from dispatch_engine.application.use_cases.assign_worker import commit_assignment
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.errors import OrderNotAssignable, OrderNotFound, WorkerNotFound
from dispatch_engine.domain.value_objects.enums import WorkerAvailability

logger = logging.getLogger(__name__)


class ManualAssignWorkerUseCase:
    def __init__(self, worker_repo: WorkerRepository, order_repo: OrderRepository):
        self._workers = worker_repo
        self._orders = order_repo

    async def execute(self, order_id: int, worker_id: int) -> Worker:
        """Assign `worker_id` to `order_id`, bypassing scoring.

        Uses the same claim / conditional write / release sequence as the
        automatic path, so a manual pick cannot double-book a worker either.
        """
        order = await self._orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if not order.is_awaiting_assignment():
            raise OrderNotAssignable(order_id, order.status.value)

        worker = await self._workers.get_by_id(worker_id)
        if worker is None:
            raise WorkerNotFound(worker_id)

        await commit_assignment(
            self._workers,
            self._orders,
            order_id,
            worker_id,
            f"Order assigned manually to worker {worker.employee_id}",
        )
        worker.availability = WorkerAvailability.BUSY

        logger.info("Order %s manually assigned to worker %s", order.tracking_id, worker.employee_id)
        return worker
