"""Order creation command and result."""

from decimal import Decimal
from typing import List, Optional

import attrs

from src.service.ticketing.domain.value_object.order_metadata import Party, SelectedSeat


@attrs.define(frozen=True)
class CreateOrderCommand:
    buyer: Party
    resource_id: int
    attendees: List[Party] = attrs.field(factory=list)
    tier_id: Optional[str] = None
    voucher_code: Optional[str] = None
    selected_seats: List[SelectedSeat] = attrs.field(factory=list)

    @property
    def parties(self) -> List[Party]:
        return [self.buyer, *self.attendees]


@attrs.define(frozen=True)
class CreateOrderResult:
    order_id: str
    payment_url: str
    payment_link_id: str
    amount: Decimal
    per_ticket_price: Decimal
    total_tickets: int
    currency: str
    status: str
    claimed_voucher_phones: List[str] = attrs.field(factory=list)
