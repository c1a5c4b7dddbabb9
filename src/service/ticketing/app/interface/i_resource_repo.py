from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.resource_entity import Resource


class IResourceRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, resource_id: int) -> Resource | None:
        pass

    @abstractmethod
    async def consume_capacity(self, *, resource_id: int, count: int) -> None:
        """tickets_sold += count, available_seats = max(0, available_seats - count)"""
        pass

    @abstractmethod
    async def restore_capacity(self, *, resource_id: int, count: int) -> None:
        """tickets_sold = max(0, tickets_sold - count), available_seats += count"""
        pass
