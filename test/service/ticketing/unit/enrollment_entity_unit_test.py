from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.entity.enrollment_entity import (
    REFUND_REASON,
    EventEnrollment,
    Ticket,
    TicketStatus,
)


def _enrollment(phones: list[str], amount: str = '1000.00') -> EventEnrollment:
    return EventEnrollment.create(
        order_id='order_abc',
        payment_id='pay_abc',
        buyer_user_id=1,
        resource_id=7,
        phones=phones,
        final_amount=Decimal(amount),
    )


@pytest.mark.unit
class TestEnrollmentCreate:
    def test_create__one_active_ticket_per_phone(self) -> None:
        enrollment = _enrollment(['9876543210', '919123456789'])

        assert enrollment.ticket_count == 2
        assert set(enrollment.tickets) == {'9876543210', '919123456789'}
        assert all(ticket.status == TicketStatus.ACTIVE for ticket in enrollment.tickets.values())

    def test_create__ticket_price_is_rounded_share(self) -> None:
        enrollment = _enrollment(['9876543210', '9123456789', '9000000001'], amount='1000.00')

        assert enrollment.ticket_price == Decimal('333.33')

    def test_create__assigns_seats_by_phone(self) -> None:
        enrollment = EventEnrollment.create(
            order_id='order_abc',
            payment_id=None,
            buyer_user_id=1,
            resource_id=7,
            phones=['9876543210'],
            final_amount=Decimal('500'),
            seat_by_phone={'9876543210': 'B4'},
        )

        assert enrollment.tickets['9876543210'].assigned_seat == 'B4'

    def test_create__requires_a_ticket_holder(self) -> None:
        with pytest.raises(DomainError):
            _enrollment([])


@pytest.mark.unit
class TestFindTicket:
    def test_exact_key(self) -> None:
        enrollment = _enrollment(['919876543210'])

        found = enrollment.find_ticket('919876543210')

        assert found is not None
        assert found[0] == '919876543210'

    def test_ticket_keyed_with_country_code__found_by_local_number(self) -> None:
        enrollment = _enrollment(['919876543210'])

        found = enrollment.find_ticket('9876543210')

        assert found is not None
        assert found[0] == '919876543210'

    def test_ticket_keyed_locally__found_by_country_code_number(self) -> None:
        enrollment = _enrollment(['9876543210'])

        found = enrollment.find_ticket('919876543210')

        assert found is not None
        assert found[0] == '9876543210'

    def test_unknown_phone(self) -> None:
        assert _enrollment(['9876543210']).find_ticket('9000000000') is None


@pytest.mark.unit
class TestRefundAll:
    def test_refund_all__flips_every_active_ticket(self) -> None:
        enrollment = _enrollment(['9876543210', '9123456789', '9000000001'])
        at = datetime(2026, 1, 1, tzinfo=timezone.utc)

        refunded, flipped = enrollment.refund_all(at=at)

        assert flipped == 3
        for ticket in refunded.tickets.values():
            assert ticket.status == TicketStatus.REFUNDED
            assert ticket.cancelled_at == at
            assert ticket.cancellation_reason == REFUND_REASON

    def test_refund_all__is_idempotent(self) -> None:
        refunded, _ = _enrollment(['9876543210', '9123456789']).refund_all()

        again, flipped = refunded.refund_all()

        assert flipped == 0
        assert again.tickets == refunded.tickets


@pytest.mark.unit
class TestTicketScan:
    def test_first_scan_records_admin_and_time(self) -> None:
        scanned = Ticket(phone='9876543210').scan(admin_id='gate-1')

        assert scanned.is_scanned
        assert scanned.scanned_by_admin_id == 'gate-1'
        assert scanned.scanned_at is not None

    def test_second_scan_keeps_original_details(self) -> None:
        first = Ticket(phone='9876543210').scan(admin_id='gate-1')

        second = first.scan(admin_id='gate-2')

        assert second.scanned_by_admin_id == 'gate-1'
        assert second.scanned_at == first.scanned_at

    def test_refunded_ticket_cannot_be_scanned(self) -> None:
        ticket = Ticket(phone='9876543210', status=TicketStatus.REFUNDED)

        with pytest.raises(DomainError) as exc_info:
            ticket.scan(admin_id='gate-1')

        assert exc_info.value.code == 'TICKET_NOT_ACTIVE'
