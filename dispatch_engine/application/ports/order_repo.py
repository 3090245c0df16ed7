"""Port interface for order persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from dispatch_engine.domain.entities.order import Order


class OrderRepository(ABC):
    @abstractmethod
    async def save(self, order: Order) -> Order:
        ...

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Order | None:
        ...

    @abstractmethod
    async def get_by_tracking_id(self, tracking_id: str) -> Order | None:
        ...

    @abstractmethod
    async def get_by_worker(self, worker_id: int) -> list[Order]:
        ...

    @abstractmethod
    async def get_confirmed_unassigned(self) -> list[Order]:
        """Return orders with status `confirmed` and no worker."""
        ...

    @abstractmethod
    async def assign(
        self,
        order_id: int,
        worker_id: int,
        assigned_at: datetime,
        description: str,
    ) -> Order | None:
        """Conditionally move a confirmed, unassigned order to `assigned`.

        Appends a timeline entry with `description`. Returns the updated order,
        or None if the order is missing or no longer awaiting assignment.
        """
        ...
