"""Port interface for worker persistence."""

from abc import ABC, abstractmethod

from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import WorkerAvailability
from dispatch_engine.domain.value_objects.geo_point import GeoPoint


class WorkerRepository(ABC):
    @abstractmethod
    async def save(self, worker: Worker) -> Worker:
        ...

    @abstractmethod
    async def get_by_id(self, worker_id: int) -> Worker | None:
        ...

    @abstractmethod
    async def get_available(self, category_hint: str | None = None) -> list[Worker]:
        """Return workers whose availability is `available`.

        `category_hint` is a pre-filter optimisation only; implementations that
        cannot filter by specialization may ignore it.
        """
        ...

    @abstractmethod
    async def claim(self, worker_id: int) -> bool:
        """Atomically flip availability available → busy.

        Returns False (and changes nothing) if the worker was not available.
        """
        ...

    @abstractmethod
    async def release(self, worker_id: int) -> bool:
        """Atomically flip availability busy → available. Compensation for claim()."""
        ...

    @abstractmethod
    async def set_availability(
        self, worker_id: int, availability: WorkerAvailability
    ) -> Worker | None:
        ...

    @abstractmethod
    async def update_location(self, worker_id: int, location: GeoPoint) -> Worker | None:
        ...
