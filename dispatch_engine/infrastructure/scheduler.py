"""Periodic sweep runner — an asyncio task owned by the app lifespan."""

from __future__ import annotations

import asyncio
import logging

from dispatch_engine.application.use_cases.assign_worker import AssignOptimalWorkerUseCase
from dispatch_engine.application.use_cases.sweep_pending_orders import (
    SweepPendingOrdersUseCase,
    SweepResult,
)
from dispatch_engine.infrastructure.storage import open_repositories

logger = logging.getLogger(__name__)


async def run_sweep_once(backend: str | None = None) -> list[SweepResult]:
    """Run one sweep; every order is committed on its own as it succeeds."""
    async with open_repositories(backend) as repos:
        sweep = SweepPendingOrdersUseCase(
            assign_worker=AssignOptimalWorkerUseCase(
                service_repo=repos.services,
                worker_repo=repos.workers,
                order_repo=repos.orders,
            ),
            order_repo=repos.orders,
            order_scope=repos.order_scope,
        )
        results = await sweep.execute()
        await repos.commit()
    return results


async def sweep_forever(interval_seconds: float, backend: str | None = None) -> None:
    """Fire a sweep every `interval_seconds` until cancelled.

    A failing sweep is logged and the loop keeps going.
    """
    logger.info("Sweep scheduler started (every %.0fs)", interval_seconds)
    while True:
        try:
            await run_sweep_once(backend)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Sweep run failed")
        await asyncio.sleep(interval_seconds)
