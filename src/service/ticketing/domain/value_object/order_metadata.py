from decimal import Decimal
from typing import Any

import attrs

from src.service.shared_kernel.domain.value_object.phone import normalize_phone


@attrs.frozen
class Party:
    """Buyer or additional attendee as submitted with the order"""

    name: str
    phone: str
    email: str | None = None


@attrs.frozen
class SelectedSeat:
    seat_label: str
    phone: str


@attrs.define
class OrderMetadata:
    """
    Snapshot stored on the Payment row at order time.

    Read-only audit trail: later steps (confirm/release vouchers, enrollment) use it to
    know exactly which phones and seats belong to the order.
    """

    buyer: Party
    attendees: list[Party] = attrs.field(factory=list)
    selected_seats: list[SelectedSeat] = attrs.field(factory=list)
    price_tier_id: str | None = None
    tier_name: str | None = None
    total_tickets: int = 1
    per_ticket_price: Decimal = Decimal('0')
    voucher_id: int | None = None
    voucher_code: str | None = None
    voucher_claimed_phones: list[str] = attrs.field(factory=list)
    refund: dict[str, Any] | None = None

    @property
    def parties(self) -> list[Party]:
        return [self.buyer, *self.attendees]

    @property
    def phones(self) -> list[str]:
        return [party.phone for party in self.parties]

    def seat_for(self, phone: str) -> str | None:
        target = normalize_phone(phone)
        for seat in self.selected_seats:
            if normalize_phone(seat.phone) == target:
                return seat.seat_label
        return None

    def to_dict(self) -> dict[str, Any]:
        data = attrs.asdict(self)
        data['per_ticket_price'] = str(self.per_ticket_price)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'OrderMetadata':
        return cls(
            buyer=Party(**data['buyer']),
            attendees=[Party(**attendee) for attendee in data.get('attendees', [])],
            selected_seats=[SelectedSeat(**seat) for seat in data.get('selected_seats', [])],
            price_tier_id=data.get('price_tier_id'),
            tier_name=data.get('tier_name'),
            total_tickets=data.get('total_tickets', 1),
            per_ticket_price=Decimal(str(data.get('per_ticket_price', '0'))),
            voucher_id=data.get('voucher_id'),
            voucher_code=data.get('voucher_code'),
            voucher_claimed_phones=list(data.get('voucher_claimed_phones', [])),
            refund=data.get('refund'),
        )
