"""Worker entity — a field worker who performs services."""

import math
from dataclasses import dataclass, field
from datetime import datetime

from dispatch_engine.domain.value_objects.enums import WorkerAvailability
from dispatch_engine.domain.value_objects.geo_point import GeoPoint

DEFAULT_RATING = 3.0


@dataclass
class Worker:
    id: int | None
    employee_id: str
    specializations: set[str] = field(default_factory=set)
    availability: WorkerAvailability = WorkerAvailability.OFFLINE
    location: GeoPoint | None = None
    average_rating: float | None = None
    last_location_update: datetime | None = None

    def is_available(self) -> bool:
        return self.availability == WorkerAvailability.AVAILABLE

    def effective_rating(self) -> float:
        # 0 is the storage default for a worker nobody has rated yet
        if not self.average_rating or not math.isfinite(self.average_rating):
            return DEFAULT_RATING
        return self.average_rating
