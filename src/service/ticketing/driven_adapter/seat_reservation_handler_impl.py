"""
Seat Reservation Handler Implementation

In-process bridge from ticketing to the reservation service use cases.
"""

from typing import List

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.command.confirm_seat_booking_use_case import (
    ConfirmSeatBookingUseCase,
)
from src.service.reservation.app.command.release_seat_reservation_use_case import (
    ReleaseSeatReservationUseCase,
)
from src.service.reservation.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.reservation.app.dto import ReservationRequest
from src.service.reservation.domain.entity.seat_entity import SeatHold
from src.service.ticketing.app.interface.i_seat_reservation_handler import (
    ISeatReservationHandler,
)
from src.service.ticketing.domain.value_object.order_metadata import SelectedSeat


class SeatReservationHandlerImpl(ISeatReservationHandler):
    def __init__(
        self,
        *,
        reserve_seats_use_case: ReserveSeatsUseCase,
        confirm_seat_booking_use_case: ConfirmSeatBookingUseCase,
        release_seat_reservation_use_case: ReleaseSeatReservationUseCase,
    ) -> None:
        self.reserve_seats_use_case = reserve_seats_use_case
        self.confirm_seat_booking_use_case = confirm_seat_booking_use_case
        self.release_seat_reservation_use_case = release_seat_reservation_use_case

    @Logger.io
    async def reserve(self, *, resource_id: int, seats: List[SelectedSeat], order_id: str) -> None:
        await self.reserve_seats_use_case.reserve_seats(
            ReservationRequest(
                resource_id=resource_id,
                order_id=order_id,
                holds=[SeatHold(seat_label=seat.seat_label, phone=seat.phone) for seat in seats],
            )
        )

    @Logger.io
    async def confirm(self, *, order_id: str) -> int:
        return await self.confirm_seat_booking_use_case.confirm(order_id=order_id)

    @Logger.io
    async def release(self, *, order_id: str) -> int:
        return await self.release_seat_reservation_use_case.release(order_id=order_id)
