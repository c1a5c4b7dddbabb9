"""Seat Reservation Application DTOs"""

from src.service.reservation.app.dto.reservation_dto import (
    ReservationRequest,
    ReservationResult,
)


__all__ = [
    'ReservationRequest',
    'ReservationResult',
]
