from datetime import datetime
from enum import StrEnum
from typing import Optional

import attrs


class SeatStatus(StrEnum):
    AVAILABLE = 'available'
    RESERVED = 'reserved'
    BOOKED = 'booked'


def normalize_seat_label(label: str) -> str:
    return label.strip().upper()


@attrs.define
class Seat:
    resource_id: int
    seat_label: str
    status: SeatStatus = SeatStatus.AVAILABLE
    order_id: Optional[str] = None
    reserved_by_phone: Optional[str] = None
    reservation_expires_at: Optional[datetime] = None

    def is_reservable(self, *, now: datetime) -> bool:
        if self.status == SeatStatus.AVAILABLE:
            return True
        return (
            self.status == SeatStatus.RESERVED
            and self.reservation_expires_at is not None
            and self.reservation_expires_at < now
        )

    @property
    def unavailable_reason(self) -> str:
        return f'{self.seat_label} ({self.status.value.upper()})'


@attrs.define(frozen=True)
class SeatHold:
    """One seat requested for an order, with the ticket holder it is meant for"""

    seat_label: str = attrs.field(converter=normalize_seat_label)
    phone: str = ''
