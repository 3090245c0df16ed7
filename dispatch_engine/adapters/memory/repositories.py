"""In-process repository implementations.

Records live in a shared `InMemoryStore`; every read returns a copy so callers
never mutate stored state behind the repository's back. Conditional writes
(claim / release / assign) are serialised by one asyncio.Lock.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone

from dispatch_engine.application.ports.order_repo import OrderRepository
from dispatch_engine.application.ports.service_repo import ServiceRepository
from dispatch_engine.application.ports.worker_repo import WorkerRepository
from dispatch_engine.domain.entities.order import Order
from dispatch_engine.domain.entities.service import Service
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import WorkerAvailability
from dispatch_engine.domain.value_objects.geo_point import GeoPoint


@dataclass
class InMemoryStore:
    services: dict[int, Service] = field(default_factory=dict)
    workers: dict[int, Worker] = field(default_factory=dict)
    orders: dict[int, Order] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def next_id(self) -> int:
        return next(self._ids)


class MemoryServiceRepository(ServiceRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, service: Service) -> Service:
        if service.id is None:
            service.id = self._store.next_id()
        self._store.services[service.id] = copy.deepcopy(service)
        return service

    async def get_by_id(self, service_id: int) -> Service | None:
        s = self._store.services.get(service_id)
        return copy.deepcopy(s) if s else None


class MemoryWorkerRepository(WorkerRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, worker: Worker) -> Worker:
        if worker.id is None:
            worker.id = self._store.next_id()
        self._store.workers[worker.id] = copy.deepcopy(worker)
        return worker

    async def get_by_id(self, worker_id: int) -> Worker | None:
        w = self._store.workers.get(worker_id)
        return copy.deepcopy(w) if w else None

    async def get_available(self, category_hint: str | None = None) -> list[Worker]:
        # category_hint is ignored: specialization is scored, not filtered
        return [
            copy.deepcopy(w)
            for _, w in sorted(self._store.workers.items())
            if w.availability == WorkerAvailability.AVAILABLE
        ]

    async def claim(self, worker_id: int) -> bool:
        return await self._swap(worker_id, WorkerAvailability.AVAILABLE, WorkerAvailability.BUSY)

    async def release(self, worker_id: int) -> bool:
        return await self._swap(worker_id, WorkerAvailability.BUSY, WorkerAvailability.AVAILABLE)

    async def set_availability(
        self, worker_id: int, availability: WorkerAvailability
    ) -> Worker | None:
        async with self._store.lock:
            w = self._store.workers.get(worker_id)
            if w is None:
                return None
            w.availability = availability
            return copy.deepcopy(w)

    async def update_location(self, worker_id: int, location: GeoPoint) -> Worker | None:
        async with self._store.lock:
            w = self._store.workers.get(worker_id)
            if w is None:
                return None
            w.location = location
            w.last_location_update = datetime.now(timezone.utc)
            return copy.deepcopy(w)

    async def _swap(
        self,
        worker_id: int,
        expected: WorkerAvailability,
        new: WorkerAvailability,
    ) -> bool:
        async with self._store.lock:
            w = self._store.workers.get(worker_id)
            if w is None or w.availability != expected:
                return False
            w.availability = new
            return True


class MemoryOrderRepository(OrderRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, order: Order) -> Order:
        if order.id is None:
            order.id = self._store.next_id()
        self._store.orders[order.id] = copy.deepcopy(order)
        return order

    async def get_by_id(self, order_id: int) -> Order | None:
        o = self._store.orders.get(order_id)
        return copy.deepcopy(o) if o else None

    async def get_by_tracking_id(self, tracking_id: str) -> Order | None:
        o = next((o for o in self._store.orders.values() if o.tracking_id == tracking_id), None)
        return copy.deepcopy(o) if o else None

    async def get_by_worker(self, worker_id: int) -> list[Order]:
        return [
            copy.deepcopy(o)
            for _, o in sorted(self._store.orders.items())
            if o.worker_id == worker_id
        ]

    async def get_confirmed_unassigned(self) -> list[Order]:
        return [
            copy.deepcopy(o)
            for _, o in sorted(self._store.orders.items())
            if o.is_awaiting_assignment()
        ]

    async def assign(
        self,
        order_id: int,
        worker_id: int,
        assigned_at: datetime,
        description: str,
    ) -> Order | None:
        async with self._store.lock:
            o = self._store.orders.get(order_id)
            if o is None or not o.is_awaiting_assignment():
                return None
            o.mark_assigned(worker_id, assigned_at, description)
            return copy.deepcopy(o)
