"""
Seat Reservation DTOs

Request/Result DTOs for the reserve step of an order.
"""

from datetime import datetime
from typing import List

import attrs

from src.service.reservation.domain.entity.seat_entity import SeatHold


@attrs.define(frozen=True)
class ReservationRequest:
    resource_id: int
    order_id: str
    holds: List[SeatHold]


@attrs.define(frozen=True)
class ReservationResult:
    order_id: str
    seat_labels: List[str]
    expires_at: datetime
