"""
Integration tests for PaymentCommandRepoImpl

The status column only moves through conditional updates; these tests check that the
second of two competing transitions loses.
"""

from decimal import Decimal

import pytest

from src.platform.database.orm_db_setting import Database
from src.service.ticketing.domain.entity.payment_entity import (
    Payment,
    PaymentStatus,
    PaymentType,
)
from src.service.ticketing.domain.value_object.order_metadata import OrderMetadata, Party
from src.service.ticketing.driven_adapter.repo.payment_command_repo_impl import (
    PaymentCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.payment_query_repo_impl import (
    PaymentQueryRepoImpl,
)


def _pending_payment(order_id: str = 'order_rzp_001') -> Payment:
    return Payment.create(
        order_id=order_id,
        resource_id=7,
        type=PaymentType.EVENT,
        amount=Decimal('1000'),
        metadata=OrderMetadata(
            buyer=Party(name='Asha', phone='9876543210'),
            attendees=[Party(name='Ravi', phone='9123456789')],
            total_tickets=2,
            per_ticket_price=Decimal('500'),
        ),
    )


@pytest.mark.integration
class TestPaymentCommandRepo:
    @pytest.fixture
    def command_repo(self, database: Database) -> PaymentCommandRepoImpl:
        return PaymentCommandRepoImpl(session_factory=database.session)

    @pytest.fixture
    def query_repo(self, database: Database) -> PaymentQueryRepoImpl:
        return PaymentQueryRepoImpl(session_factory=database.session)

    @pytest.mark.asyncio
    async def test_create_keeps_metadata_snapshot(
        self, command_repo: PaymentCommandRepoImpl, query_repo: PaymentQueryRepoImpl
    ) -> None:
        await command_repo.create(payment=_pending_payment())

        stored = await query_repo.get_by_order_id(order_id='order_rzp_001')

        assert stored is not None
        assert stored.status == PaymentStatus.PENDING
        assert stored.final_amount == Decimal('1000')
        assert stored.metadata.buyer.phone == '9876543210'
        assert [a.phone for a in stored.metadata.attendees] == ['9123456789']

    @pytest.mark.asyncio
    async def test_only_first_transition_wins(
        self, command_repo: PaymentCommandRepoImpl, query_repo: PaymentQueryRepoImpl
    ) -> None:
        # Arrange - the same pending row read by two deliveries
        payment = await command_repo.create(payment=_pending_payment())
        succeeded = payment.mark_succeeded(gateway_payment_id='pay_001')
        failed = payment.mark_failed(reason='card declined')

        # Act
        first = await command_repo.transition_status(
            payment=succeeded, expected=PaymentStatus.PENDING
        )
        second = await command_repo.transition_status(
            payment=failed, expected=PaymentStatus.PENDING
        )

        # Assert
        assert first is True
        assert second is False
        stored = await query_repo.get_by_order_id(order_id='order_rzp_001')
        assert stored is not None
        assert stored.status == PaymentStatus.SUCCESS
        assert stored.gateway_payment_id == 'pay_001'
        assert stored.purchased_at is not None
        by_gateway_id = await query_repo.get_by_gateway_payment_id(gateway_payment_id='pay_001')
        assert by_gateway_id is not None
        assert by_gateway_id.order_id == 'order_rzp_001'

    @pytest.mark.asyncio
    async def test_delete_only_removes_pending(
        self, command_repo: PaymentCommandRepoImpl
    ) -> None:
        payment = await command_repo.create(payment=_pending_payment())
        await command_repo.transition_status(
            payment=payment.mark_succeeded(gateway_payment_id='pay_001'),
            expected=PaymentStatus.PENDING,
        )

        assert await command_repo.delete(order_id='order_rzp_001') is False

    @pytest.mark.asyncio
    async def test_record_refund_leaves_status(
        self, command_repo: PaymentCommandRepoImpl, query_repo: PaymentQueryRepoImpl
    ) -> None:
        await command_repo.create(payment=_pending_payment())

        await command_repo.record_refund(
            order_id='order_rzp_001', refund={'id': 'rfnd_001', 'status': 'created'}
        )

        stored = await query_repo.get_by_order_id(order_id='order_rzp_001')
        assert stored is not None
        assert stored.status == PaymentStatus.PENDING
        assert stored.metadata.refund == {'id': 'rfnd_001', 'status': 'created'}
