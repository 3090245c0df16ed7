"""Port interface for service catalogue lookups."""

from abc import ABC, abstractmethod

from dispatch_engine.domain.entities.service import Service


class ServiceRepository(ABC):
    @abstractmethod
    async def save(self, service: Service) -> Service:
        ...

    @abstractmethod
    async def get_by_id(self, service_id: int) -> Service | None:
        ...
