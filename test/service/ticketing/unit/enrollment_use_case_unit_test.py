from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.app.command.create_enrollment_use_case import CreateEnrollmentUseCase
from src.service.ticketing.app.command.notify_ticket_holders_use_case import (
    NotifyTicketHoldersUseCase,
)
from src.service.ticketing.app.command.reverse_enrollment_use_case import (
    ReverseEnrollmentUseCase,
)
from src.service.ticketing.domain.entity.enrollment_entity import EventEnrollment, TicketStatus
from src.service.ticketing.domain.entity.payment_entity import Payment, PaymentType
from src.service.ticketing.domain.entity.resource_entity import Resource
from src.service.ticketing.domain.entity.user_entity import User
from src.service.ticketing.domain.value_object.order_metadata import (
    OrderMetadata,
    Party,
    SelectedSeat,
)
from src.service.ticketing.driven_adapter.security.ticket_token_signer_impl import (
    TicketTokenSignerImpl,
)


PHONES = ['9876543210', '919123456789', '9000000001']


def _succeeded_payment() -> Payment:
    payment = Payment.create(
        order_id='order_001',
        resource_id=7,
        type=PaymentType.EVENT,
        amount=Decimal('1500'),
        metadata=OrderMetadata(
            buyer=Party(name='Asha', phone=PHONES[0], email='asha@mailbox.org'),
            attendees=[Party(name='Ravi', phone=PHONES[1]), Party(name='Meera', phone=PHONES[2])],
            selected_seats=[SelectedSeat(seat_label='A1', phone=PHONES[1])],
            total_tickets=3,
            per_ticket_price=Decimal('500'),
        ),
    )
    return payment.mark_succeeded(gateway_payment_id='pay_001')


def _enrollment() -> EventEnrollment:
    return EventEnrollment.create(
        order_id='order_001',
        payment_id='pay_001',
        buyer_user_id=1,
        resource_id=7,
        phones=PHONES,
        final_amount=Decimal('1500'),
    )


@pytest.fixture
def user_command_repo() -> AsyncMock:
    repo = AsyncMock()
    ids = iter(range(1, 100))

    async def _get_or_create(*, phone: str, name: str, email: str | None) -> User:
        return User(id=next(ids), phone=phone[-10:], name=name, email=email)

    repo.get_or_create.side_effect = _get_or_create
    return repo


@pytest.fixture
def enrollment_query_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_buyer_and_resource.return_value = None
    return repo


@pytest.fixture
def enrollment_command_repo() -> AsyncMock:
    repo = AsyncMock()

    async def _create_if_absent(*, enrollment: EventEnrollment) -> tuple[EventEnrollment, bool]:
        return enrollment, True

    repo.create_if_absent.side_effect = _create_if_absent
    return repo


@pytest.fixture
def resource_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = Resource(id=7, name='Open Air Night')
    return repo


@pytest.mark.unit
class TestCreateEnrollment:
    @pytest.fixture
    def use_case(
        self,
        user_command_repo: AsyncMock,
        enrollment_query_repo: AsyncMock,
        enrollment_command_repo: AsyncMock,
        resource_repo: AsyncMock,
    ) -> CreateEnrollmentUseCase:
        return CreateEnrollmentUseCase(
            user_command_repo=user_command_repo,
            payment_command_repo=AsyncMock(),
            enrollment_query_repo=enrollment_query_repo,
            enrollment_command_repo=enrollment_command_repo,
            resource_repo=resource_repo,
        )

    @pytest.mark.asyncio
    async def test_creates_ticket_per_phone_and_consumes_capacity(
        self, use_case: CreateEnrollmentUseCase, resource_repo: AsyncMock
    ) -> None:
        # Act
        enrollment, users = await use_case.execute(payment=_succeeded_payment())

        # Assert
        assert list(enrollment.tickets) == PHONES
        assert enrollment.ticket_price == Decimal('500.00')
        assert enrollment.buyer_user_id == 1
        assert enrollment.tickets[PHONES[1]].assigned_seat == 'A1'
        assert set(users) == {'9876543210', '9123456789', '9000000001'}
        resource_repo.consume_capacity.assert_awaited_once_with(resource_id=7, count=3)

    @pytest.mark.asyncio
    async def test_existing_enrollment_is_returned(
        self,
        use_case: CreateEnrollmentUseCase,
        enrollment_query_repo: AsyncMock,
        enrollment_command_repo: AsyncMock,
        resource_repo: AsyncMock,
    ) -> None:
        existing = _enrollment()
        enrollment_query_repo.get_by_buyer_and_resource.return_value = existing

        enrollment, _ = await use_case.execute(payment=_succeeded_payment())

        assert enrollment is existing
        enrollment_command_repo.create_if_absent.assert_not_awaited()
        resource_repo.consume_capacity.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unresolved_buyer__domain_error(
        self,
        use_case: CreateEnrollmentUseCase,
        user_command_repo: AsyncMock,
        enrollment_command_repo: AsyncMock,
    ) -> None:
        user_command_repo.get_or_create.side_effect = None
        user_command_repo.get_or_create.return_value = User(phone='9876543210', name='Asha')

        with pytest.raises(DomainError, match='could not be resolved'):
            await use_case.execute(payment=_succeeded_payment())

        enrollment_command_repo.create_if_absent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_insert_race__capacity_untouched(
        self,
        use_case: CreateEnrollmentUseCase,
        enrollment_command_repo: AsyncMock,
        resource_repo: AsyncMock,
    ) -> None:
        existing = _enrollment()
        enrollment_command_repo.create_if_absent.side_effect = None
        enrollment_command_repo.create_if_absent.return_value = (existing, False)

        enrollment, _ = await use_case.execute(payment=_succeeded_payment())

        assert enrollment is existing
        resource_repo.consume_capacity.assert_not_awaited()


@pytest.mark.unit
class TestReverseEnrollment:
    @pytest.fixture
    def use_case(
        self,
        enrollment_query_repo: AsyncMock,
        enrollment_command_repo: AsyncMock,
        resource_repo: AsyncMock,
    ) -> ReverseEnrollmentUseCase:
        return ReverseEnrollmentUseCase(
            enrollment_query_repo=enrollment_query_repo,
            enrollment_command_repo=enrollment_command_repo,
            resource_repo=resource_repo,
        )

    @pytest.mark.asyncio
    async def test_refund_of_three_tickets_restores_three_seats(
        self,
        use_case: ReverseEnrollmentUseCase,
        enrollment_query_repo: AsyncMock,
        enrollment_command_repo: AsyncMock,
        resource_repo: AsyncMock,
    ) -> None:
        # Arrange
        enrollment_query_repo.get_by_order_id.return_value = _enrollment()

        # Act
        flipped = await use_case.execute(order_id='order_001')

        # Assert
        assert flipped == 3
        saved: EventEnrollment = enrollment_command_repo.save_tickets.await_args.kwargs[
            'enrollment'
        ]
        assert all(t.status == TicketStatus.REFUNDED for t in saved.tickets.values())
        resource_repo.restore_capacity.assert_awaited_once_with(resource_id=7, count=3)

    @pytest.mark.asyncio
    async def test_already_refunded__no_capacity_change(
        self,
        use_case: ReverseEnrollmentUseCase,
        enrollment_query_repo: AsyncMock,
        resource_repo: AsyncMock,
    ) -> None:
        refunded, _ = _enrollment().refund_all()
        enrollment_query_repo.get_by_order_id.return_value = refunded

        flipped = await use_case.execute(order_id='order_001')

        assert flipped == 0
        resource_repo.restore_capacity.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_enrollment(
        self, use_case: ReverseEnrollmentUseCase, enrollment_query_repo: AsyncMock
    ) -> None:
        enrollment_query_repo.get_by_order_id.return_value = None

        assert await use_case.execute(order_id='order_nope') == 0


@pytest.mark.unit
class TestNotifyTicketHolders:
    @pytest.mark.asyncio
    async def test_one_message_per_active_ticket_and_email_for_buyer(
        self, resource_repo: AsyncMock
    ) -> None:
        # Arrange
        sender = AsyncMock()
        use_case = NotifyTicketHoldersUseCase(
            notification_sender=sender,
            ticket_token_signer=TicketTokenSignerImpl(secret='notify_secret'),
            resource_repo=resource_repo,
        )

        # Act
        sent = await use_case.execute(enrollment=_enrollment(), payment=_succeeded_payment())

        # Assert
        assert sent == 3
        assert sender.send_ticket.await_count == 3
        first_call = sender.send_ticket.await_args_list[0].kwargs
        assert first_call['resource_name'] == 'Open Air Night'
        assert '/api/tickets/verify?token=' in first_call['qr_url']
        sender.send_email.assert_awaited_once()
        assert sender.send_email.await_args.kwargs['to'] == 'asha@mailbox.org'

    @pytest.mark.asyncio
    async def test_one_failed_delivery_does_not_stop_the_rest(
        self, resource_repo: AsyncMock
    ) -> None:
        sender = AsyncMock()
        sender.send_ticket.side_effect = [RuntimeError('sms down'), None, None]
        use_case = NotifyTicketHoldersUseCase(
            notification_sender=sender,
            ticket_token_signer=TicketTokenSignerImpl(secret='notify_secret'),
            resource_repo=resource_repo,
        )

        sent = await use_case.execute(enrollment=_enrollment(), payment=_succeeded_payment())

        assert sent == 2
        assert sender.send_ticket.await_count == 3
