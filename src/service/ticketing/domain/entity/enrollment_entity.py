from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Dict, List, Optional

import attrs
from uuid_utils import UUID, uuid7

from src.platform.exception.exceptions import DomainError
from src.service.shared_kernel.domain.value_object.phone import normalize_phone


REFUND_REASON = 'Payment refunded'


class TicketStatus(StrEnum):
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'


@attrs.define
class Ticket:
    phone: str
    status: TicketStatus = TicketStatus.ACTIVE
    assigned_seat: Optional[str] = None
    is_scanned: bool = False
    scanned_at: Optional[datetime] = None
    scanned_by_admin_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == TicketStatus.ACTIVE

    def refund(self, *, at: datetime, reason: str = REFUND_REASON) -> 'Ticket':
        return attrs.evolve(
            self, status=TicketStatus.REFUNDED, cancelled_at=at, cancellation_reason=reason
        )

    def scan(self, *, admin_id: str, at: Optional[datetime] = None) -> 'Ticket':
        if not self.is_active:
            raise DomainError(f'Ticket is {self.status.value}', code='TICKET_NOT_ACTIVE')
        if self.is_scanned:
            return self
        return attrs.evolve(
            self,
            is_scanned=True,
            scanned_at=at or datetime.now(timezone.utc),
            scanned_by_admin_id=admin_id,
        )


@attrs.define
class EventEnrollment:
    id: UUID
    order_id: str
    buyer_user_id: int
    resource_id: int
    ticket_count: int
    ticket_price: Decimal
    tickets: Dict[str, Ticket] = attrs.field(factory=dict)
    payment_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        order_id: str,
        payment_id: Optional[str],
        buyer_user_id: int,
        resource_id: int,
        phones: List[str],
        final_amount: Decimal,
        seat_by_phone: Optional[Dict[str, str]] = None,
    ) -> 'EventEnrollment':
        if not phones:
            raise DomainError('Enrollment needs at least one ticket holder')
        seat_by_phone = seat_by_phone or {}
        tickets = {
            phone: Ticket(phone=phone, assigned_seat=seat_by_phone.get(phone)) for phone in phones
        }
        ticket_price = (final_amount / len(tickets)).quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )
        return cls(
            id=uuid7(),
            order_id=order_id,
            payment_id=payment_id,
            buyer_user_id=buyer_user_id,
            resource_id=resource_id,
            ticket_count=len(tickets),
            ticket_price=ticket_price,
            tickets=tickets,
            created_at=datetime.now(timezone.utc),
        )

    def find_ticket(self, phone: str) -> tuple[str, Ticket] | None:
        """
        Locate a ticket by phone: exact key, then the normalized key, then a scan
        comparing normalized forms of every key.
        """
        if phone in self.tickets:
            return phone, self.tickets[phone]

        normalized = normalize_phone(phone)
        if normalized in self.tickets:
            return normalized, self.tickets[normalized]

        for key, ticket in self.tickets.items():
            if normalize_phone(key) == normalized:
                return key, ticket
        return None

    def refund_all(
        self, *, at: Optional[datetime] = None, reason: str = REFUND_REASON
    ) -> tuple['EventEnrollment', int]:
        """Flip every non-refunded ticket; returns the new enrollment and how many flipped"""
        now = at or datetime.now(timezone.utc)
        flipped = 0
        tickets: Dict[str, Ticket] = {}
        for key, ticket in self.tickets.items():
            if ticket.status == TicketStatus.REFUNDED:
                tickets[key] = ticket
                continue
            tickets[key] = ticket.refund(at=now, reason=reason)
            flipped += 1
        return attrs.evolve(self, tickets=tickets), flipped
