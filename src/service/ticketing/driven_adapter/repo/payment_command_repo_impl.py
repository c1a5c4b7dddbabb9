"""
Payment Command Repository Implementation

Status changes are conditional UPDATEs keyed on the expected status. The rowcount tells
the caller whether it won the transition; concurrent webhook deliveries lose quietly.
"""

from typing import Any, AsyncContextManager, Callable

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_command_repo import IPaymentCommandRepo
from src.service.ticketing.domain.entity.payment_entity import Payment, PaymentStatus
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.ticketing.driven_adapter.repo.payment_query_repo_impl import (
    PaymentQueryRepoImpl,
)


class PaymentCommandRepoImpl(IPaymentCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, payment: Payment) -> Payment:
        async with self.session_factory() as session:
            payment_model = PaymentModel(
                order_id=payment.order_id,
                gateway_payment_id=payment.gateway_payment_id,
                type=payment.type.value,
                resource_id=payment.resource_id,
                buyer_user_id=payment.buyer_user_id,
                amount=payment.amount,
                discount_amount=payment.discount_amount,
                final_amount=payment.final_amount,
                currency=payment.currency,
                status=payment.status.value,
                failure_reason=payment.failure_reason,
                purchased_at=payment.purchased_at,
                payment_link_id=payment.payment_link_id,
                payment_url=payment.payment_url,
                order_metadata=payment.metadata.to_dict(),
            )
            if payment.created_at:
                payment_model.created_at = payment.created_at
                payment_model.updated_at = payment.updated_at or payment.created_at

            session.add(payment_model)
            await session.commit()
            await session.refresh(payment_model)

            return PaymentQueryRepoImpl._model_to_entity(payment_model)

    @Logger.io
    async def delete(self, *, order_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(PaymentModel).where(
                    PaymentModel.order_id == order_id,
                    PaymentModel.status == PaymentStatus.PENDING.value,
                )
            )
            await session.commit()
            return result.rowcount > 0  # type: ignore[attr-defined]

    @Logger.io
    async def transition_status(self, *, payment: Payment, expected: PaymentStatus) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(PaymentModel)
                .where(
                    PaymentModel.order_id == payment.order_id,
                    PaymentModel.status == expected.value,
                )
                .values(
                    status=payment.status.value,
                    gateway_payment_id=payment.gateway_payment_id,
                    failure_reason=payment.failure_reason,
                    purchased_at=payment.purchased_at,
                    updated_at=payment.updated_at,
                )
            )
            await session.commit()

            won = result.rowcount == 1  # type: ignore[attr-defined]
            if won:
                Logger.base.info(
                    f'💳 [PAYMENT] {payment.order_id}: {expected.value} -> {payment.status.value}'
                )
            return won

    @Logger.io
    async def set_payment_link(self, *, order_id: str, link_id: str, url: str) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(PaymentModel)
                .where(PaymentModel.order_id == order_id)
                .values(payment_link_id=link_id, payment_url=url)
            )
            await session.commit()

    @Logger.io
    async def set_buyer_user(self, *, order_id: str, buyer_user_id: int) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(PaymentModel)
                .where(PaymentModel.order_id == order_id)
                .values(buyer_user_id=buyer_user_id)
            )
            await session.commit()

    @Logger.io
    async def record_refund(self, *, order_id: str, refund: dict[str, Any]) -> None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PaymentModel).where(PaymentModel.order_id == order_id).with_for_update()
            )
            payment_model = result.scalar_one_or_none()
            if payment_model is None:
                return

            # Reassign so the JSON column is flagged dirty
            payment_model.order_metadata = {**payment_model.order_metadata, 'refund': refund}
            await session.commit()
