"""Order entity — a customer booking for a service."""

from dataclasses import dataclass, field
from datetime import datetime

from dispatch_engine.domain.value_objects.enums import OrderStatus
from dispatch_engine.domain.value_objects.geo_point import GeoPoint


@dataclass(frozen=True)
class CustomerLocation:
    lat: float
    lng: float
    address: str = ""

    def to_geo_point(self) -> GeoPoint:
        return GeoPoint(latitude=self.lat, longitude=self.lng)


@dataclass(frozen=True)
class TimelineEntry:
    status: OrderStatus
    timestamp: datetime
    description: str


@dataclass
class Order:
    id: int | None
    tracking_id: str
    service_id: int
    customer_location: CustomerLocation | None = None
    status: OrderStatus = OrderStatus.PENDING
    worker_id: int | None = None
    scheduled_time: datetime | None = None
    assigned_at: datetime | None = None
    timeline: list[TimelineEntry] = field(default_factory=list)

    def is_awaiting_assignment(self) -> bool:
        return self.status == OrderStatus.CONFIRMED and self.worker_id is None

    def mark_assigned(self, worker_id: int, assigned_at: datetime, description: str) -> None:
        """Apply the confirmed → assigned transition in place."""
        self.worker_id = worker_id
        self.status = OrderStatus.ASSIGNED
        self.assigned_at = assigned_at
        self.timeline.append(
            TimelineEntry(
                status=OrderStatus.ASSIGNED,
                timestamp=assigned_at,
                description=description,
            )
        )
