from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from src.service.reservation.domain.entity.seat_entity import SeatHold


class ISeatCommandRepo(ABC):
    @abstractmethod
    async def sweep_expired(self, *, resource_id: int, now: datetime) -> int:
        """Return expired RESERVED seats of the resource to AVAILABLE"""
        pass

    @abstractmethod
    async def reserve(
        self,
        *,
        resource_id: int,
        holds: List[SeatHold],
        order_id: str,
        expires_at: datetime,
        now: datetime,
    ) -> List[str]:
        """
        Reserve every seat or none of them

        Returns:
            Reasons for the seats that could not be reserved, e.g. "A1 (BOOKED)".
            Empty when all seats are now held by the order.
        """
        pass

    @abstractmethod
    async def confirm(self, *, order_id: str) -> int:
        """RESERVED -> BOOKED for every seat held by the order"""
        pass

    @abstractmethod
    async def release(self, *, order_id: str) -> int:
        """RESERVED -> AVAILABLE for every seat held by the order"""
        pass
