from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.entity.payment_entity import PaymentType


@attrs.define
class PricingTier:
    id: str
    name: str
    price: Decimal
    compare_at_price: Optional[Decimal] = None


@attrs.define
class Resource:
    """Event or session that tickets are sold for. Managed elsewhere; read here."""

    id: int
    name: str
    type: PaymentType = PaymentType.EVENT
    is_live: bool = False
    booking_start_at: Optional[datetime] = None
    booking_end_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    price: Optional[Decimal] = None
    pricing_tiers: List[PricingTier] = attrs.field(factory=list)
    has_seat_arrangement: bool = False
    available_seats: int = 0
    tickets_sold: int = 0

    def ensure_open_for_booking(self, *, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(timezone.utc)
        if not self.is_live:
            raise DomainError('Event is not available for booking')
        if self.end_at and self.end_at <= now:
            raise DomainError('Event has already ended')
        if self.booking_start_at and now < self.booking_start_at:
            raise DomainError(f'Booking opens on {self.booking_start_at.isoformat()}')
        if self.booking_end_at and now > self.booking_end_at:
            raise DomainError('Booking has closed for this event')

    def ensure_capacity(self) -> None:
        if self.available_seats <= 0:
            raise DomainError('No seats available for this event')

    def resolve_price(self, tier_id: Optional[str]) -> tuple[Decimal, Optional[PricingTier]]:
        if tier_id:
            tier = next((t for t in self.pricing_tiers if t.id == tier_id), None)
            if tier is None:
                raise DomainError('Invalid pricing tier selected')
            price: Optional[Decimal] = tier.price
        else:
            tier = None
            if self.price is None:
                raise DomainError(
                    'Event does not have default pricing. Please specify a pricing tier.'
                )
            price = self.price

        if price is None or price <= 0:
            raise DomainError('Invalid price configuration for this event')
        return price, tier
