"""Storage backend selection — one repository bundle per unit of work."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_engine.adapters.memory.repositories import (
    InMemoryStore,
    MemoryOrderRepository,
    MemoryServiceRepository,
    MemoryWorkerRepository,
)
from dispatch_engine.adapters.persistence.database import async_session_factory
from dispatch_engine.adapters.persistence.repositories import (
    SqlOrderRepository,
    SqlServiceRepository,
    SqlWorkerRepository,
)
from dispatch_engine.application.ports.order_repo import OrderRepository
from dispatch_engine.application.ports.service_repo import ServiceRepository
from dispatch_engine.application.ports.worker_repo import WorkerRepository
from dispatch_engine.config import settings

logger = logging.getLogger(__name__)

# Process-wide store for the "memory" backend
memory_store = InMemoryStore()


@dataclass
class Repositories:
    services: ServiceRepository
    workers: WorkerRepository
    orders: OrderRepository
    session: AsyncSession | None = None

    async def commit(self) -> None:
        if self.session is not None:
            await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()

    @asynccontextmanager
    async def order_scope(self) -> AsyncIterator[None]:
        """Savepoint around one order, committed as soon as the order succeeds.

        On error only the savepoint is rolled back; earlier orders stay
        committed and their row locks are already released.
        """
        if self.session is None:
            yield
            return
        async with self.session.begin_nested():
            yield
        await self.session.commit()


def memory_repositories(store: InMemoryStore) -> Repositories:
    return Repositories(
        services=MemoryServiceRepository(store),
        workers=MemoryWorkerRepository(store),
        orders=MemoryOrderRepository(store),
    )


def sql_repositories(session: AsyncSession) -> Repositories:
    return Repositories(
        services=SqlServiceRepository(session),
        workers=SqlWorkerRepository(session),
        orders=SqlOrderRepository(session),
        session=session,
    )


@asynccontextmanager
async def open_repositories(backend: str | None = None) -> AsyncIterator[Repositories]:
    """Yield repositories for the configured backend; roll back if the block raises."""
    backend = backend or settings.storage_backend
    if backend == "memory":
        yield memory_repositories(memory_store)
        return

    async with async_session_factory() as session:
        repos = sql_repositories(session)
        try:
            yield repos
        except Exception:
            await repos.rollback()
            raise
