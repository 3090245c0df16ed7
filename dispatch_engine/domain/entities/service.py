"""Service entity — a bookable home service (wash, lawn care, ...)."""

from dataclasses import dataclass
from decimal import Decimal

from dispatch_engine.domain.value_objects.enums import ServiceCategory


@dataclass
class Service:
    id: int | None
    category: ServiceCategory
    name: str
    base_price: Decimal
    duration_minutes: int
