"""
Seat Reservation Handler Interface

Narrow handshake with the seat reservation service: reserve is all-or-nothing,
confirm and release act on every seat held by the order.
"""

from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.value_object.order_metadata import SelectedSeat


class ISeatReservationHandler(ABC):
    @abstractmethod
    async def reserve(self, *, resource_id: int, seats: List[SelectedSeat], order_id: str) -> None:
        """
        Raises:
            SeatUnavailableError: one or more seats could not be reserved (nothing is held)
        """
        pass

    @abstractmethod
    async def confirm(self, *, order_id: str) -> int:
        """RESERVED -> BOOKED; returns number of seats booked"""
        pass

    @abstractmethod
    async def release(self, *, order_id: str) -> int:
        """RESERVED -> AVAILABLE; returns number of seats released"""
        pass
