"""SQLAlchemy repository implementations."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_engine.adapters.persistence.models import OrderModel, ServiceModel, WorkerModel
from dispatch_engine.application.ports.order_repo import OrderRepository
from dispatch_engine.application.ports.service_repo import ServiceRepository
from dispatch_engine.application.ports.worker_repo import WorkerRepository
from dispatch_engine.domain.entities.order import CustomerLocation, Order, TimelineEntry
from dispatch_engine.domain.entities.service import Service
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import (
    OrderStatus,
    ServiceCategory,
    WorkerAvailability,
)
from dispatch_engine.domain.value_objects.geo_point import GeoPoint

# ─── Mappers ─────────────────────────────────────────────────────────


def _service_to_domain(m: ServiceModel) -> Service:
    return Service(
        id=m.id,
        category=ServiceCategory(m.category),
        name=m.name,
        base_price=m.base_price,
        duration_minutes=m.duration_minutes,
    )


def _worker_to_domain(m: WorkerModel) -> Worker:
    location = None
    if m.current_lat is not None and m.current_lng is not None:
        location = GeoPoint(latitude=m.current_lat, longitude=m.current_lng)
    return Worker(
        id=m.id,
        employee_id=m.employee_id,
        specializations=set(m.specializations) if m.specializations else set(),
        availability=WorkerAvailability(m.availability),
        location=location,
        average_rating=m.average_rating,
        last_location_update=m.last_location_update,
    )


def _timeline_entry_to_domain(raw: dict) -> TimelineEntry:
    return TimelineEntry(
        status=OrderStatus(raw["status"]),
        timestamp=datetime.fromisoformat(raw["timestamp"]),
        description=raw.get("description", ""),
    )


def _timeline_entry_to_json(entry: TimelineEntry) -> dict:
    return {
        "status": entry.status.value,
        "timestamp": entry.timestamp.isoformat(),
        "description": entry.description,
    }


def _order_to_domain(m: OrderModel) -> Order:
    location = None
    if m.customer_lat is not None and m.customer_lng is not None:
        location = CustomerLocation(
            lat=m.customer_lat, lng=m.customer_lng, address=m.customer_address or ""
        )
    return Order(
        id=m.id,
        tracking_id=m.tracking_id,
        service_id=m.service_id,
        customer_location=location,
        status=OrderStatus(m.status),
        worker_id=m.worker_id,
        scheduled_time=m.scheduled_time,
        assigned_at=m.assigned_at,
        timeline=[_timeline_entry_to_domain(e) for e in (m.timeline or [])],
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlServiceRepository(ServiceRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, service: Service) -> Service:
        m = ServiceModel(
            category=service.category.value,
            name=service.name,
            base_price=service.base_price,
            duration_minutes=service.duration_minutes,
        )
        self._s.add(m)
        await self._s.flush()
        service.id = m.id
        return service

    async def get_by_id(self, service_id: int) -> Service | None:
        m = await self._s.get(ServiceModel, service_id)
        return _service_to_domain(m) if m else None


class SqlWorkerRepository(WorkerRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, worker: Worker) -> Worker:
        m = WorkerModel(
            employee_id=worker.employee_id,
            specializations=sorted(worker.specializations),
            availability=worker.availability.value,
            current_lat=worker.location.latitude if worker.location else None,
            current_lng=worker.location.longitude if worker.location else None,
            last_location_update=worker.last_location_update,
            average_rating=worker.average_rating,
        )
        self._s.add(m)
        await self._s.flush()
        worker.id = m.id
        return worker

    async def get_by_id(self, worker_id: int) -> Worker | None:
        m = await self._s.get(WorkerModel, worker_id)
        return _worker_to_domain(m) if m else None

    async def get_available(self, category_hint: str | None = None) -> list[Worker]:
        # category_hint is not applied: non-specialists are still scored
        result = await self._s.execute(
            select(WorkerModel)
            .where(WorkerModel.availability == WorkerAvailability.AVAILABLE.value)
            .order_by(WorkerModel.id)
        )
        return [_worker_to_domain(m) for m in result.scalars()]

    async def claim(self, worker_id: int) -> bool:
        return await self._swap(worker_id, WorkerAvailability.AVAILABLE, WorkerAvailability.BUSY)

    async def release(self, worker_id: int) -> bool:
        return await self._swap(worker_id, WorkerAvailability.BUSY, WorkerAvailability.AVAILABLE)

    async def set_availability(
        self, worker_id: int, availability: WorkerAvailability
    ) -> Worker | None:
        await self._s.execute(
            update(WorkerModel)
            .where(WorkerModel.id == worker_id)
            .values(availability=availability.value)
        )
        await self._s.flush()
        return await self._refreshed(worker_id)

    async def update_location(self, worker_id: int, location: GeoPoint) -> Worker | None:
        await self._s.execute(
            update(WorkerModel)
            .where(WorkerModel.id == worker_id)
            .values(
                current_lat=location.latitude,
                current_lng=location.longitude,
                last_location_update=datetime.now(timezone.utc),
            )
        )
        await self._s.flush()
        return await self._refreshed(worker_id)

    async def _swap(
        self,
        worker_id: int,
        expected: WorkerAvailability,
        new: WorkerAvailability,
    ) -> bool:
        # Single conditional UPDATE: the row only changes if nobody moved it first
        result = await self._s.execute(
            update(WorkerModel)
            .where(WorkerModel.id == worker_id)
            .where(WorkerModel.availability == expected.value)
            .values(availability=new.value)
            .returning(WorkerModel.id)
        )
        swapped = result.scalar_one_or_none() is not None
        await self._s.flush()
        return swapped

    async def _refreshed(self, worker_id: int) -> Worker | None:
        m = await self._s.get(WorkerModel, worker_id, populate_existing=True)
        return _worker_to_domain(m) if m else None


class SqlOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, order: Order) -> Order:
        loc = order.customer_location
        m = OrderModel(
            tracking_id=order.tracking_id,
            service_id=order.service_id,
            worker_id=order.worker_id,
            customer_lat=loc.lat if loc else None,
            customer_lng=loc.lng if loc else None,
            customer_address=loc.address if loc else None,
            status=order.status.value,
            scheduled_time=order.scheduled_time,
            assigned_at=order.assigned_at,
            timeline=[_timeline_entry_to_json(e) for e in order.timeline],
        )
        self._s.add(m)
        await self._s.flush()
        order.id = m.id
        return order

    async def get_by_id(self, order_id: int) -> Order | None:
        m = await self._s.get(OrderModel, order_id)
        return _order_to_domain(m) if m else None

    async def get_by_tracking_id(self, tracking_id: str) -> Order | None:
        result = await self._s.execute(
            select(OrderModel).where(OrderModel.tracking_id == tracking_id)
        )
        m = result.scalar_one_or_none()
        return _order_to_domain(m) if m else None

    async def get_by_worker(self, worker_id: int) -> list[Order]:
        result = await self._s.execute(
            select(OrderModel)
            .where(OrderModel.worker_id == worker_id)
            .order_by(OrderModel.created_at.desc())
        )
        return [_order_to_domain(m) for m in result.scalars()]

    async def get_confirmed_unassigned(self) -> list[Order]:
        result = await self._s.execute(
            select(OrderModel)
            .where(OrderModel.status == OrderStatus.CONFIRMED.value)
            .where(OrderModel.worker_id.is_(None))
            .order_by(OrderModel.id)
        )
        return [_order_to_domain(m) for m in result.scalars()]

    async def assign(
        self,
        order_id: int,
        worker_id: int,
        assigned_at: datetime,
        description: str,
    ) -> Order | None:
        result = await self._s.execute(
            select(OrderModel).where(OrderModel.id == order_id).with_for_update()
        )
        m = result.scalar_one_or_none()
        if m is None:
            return None
        if m.status != OrderStatus.CONFIRMED.value or m.worker_id is not None:
            return None

        entry = TimelineEntry(
            status=OrderStatus.ASSIGNED, timestamp=assigned_at, description=description
        )
        m.worker_id = worker_id
        m.status = OrderStatus.ASSIGNED.value
        m.assigned_at = assigned_at
        # Reassign so the JSONB change is tracked
        m.timeline = [*(m.timeline or []), _timeline_entry_to_json(entry)]
        await self._s.flush()
        return _order_to_domain(m)
