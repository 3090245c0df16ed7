"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends

from dispatch_engine.application.use_cases.assign_worker import AssignOptimalWorkerUseCase
from dispatch_engine.application.use_cases.manual_assign import ManualAssignWorkerUseCase
from dispatch_engine.application.use_cases.sweep_pending_orders import (
    SweepPendingOrdersUseCase,
)
from dispatch_engine.infrastructure.storage import Repositories, open_repositories


async def get_repositories() -> AsyncIterator[Repositories]:
    async with open_repositories() as repos:
        yield repos


def get_assign_worker_uc(
    repos: Repositories = Depends(get_repositories),
) -> AssignOptimalWorkerUseCase:
    return AssignOptimalWorkerUseCase(
        service_repo=repos.services,
        worker_repo=repos.workers,
        order_repo=repos.orders,
    )


def get_sweep_uc(
    repos: Repositories = Depends(get_repositories),
) -> SweepPendingOrdersUseCase:
    return SweepPendingOrdersUseCase(
        assign_worker=AssignOptimalWorkerUseCase(
            service_repo=repos.services,
            worker_repo=repos.workers,
            order_repo=repos.orders,
        ),
        order_repo=repos.orders,
        order_scope=repos.order_scope,
    )


def get_manual_assign_uc(
    repos: Repositories = Depends(get_repositories),
) -> ManualAssignWorkerUseCase:
    return ManualAssignWorkerUseCase(worker_repo=repos.workers, order_repo=repos.orders)
