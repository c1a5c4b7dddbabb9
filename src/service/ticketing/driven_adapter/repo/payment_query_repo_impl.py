from decimal import Decimal
from typing import AsyncContextManager, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_query_repo import IPaymentQueryRepo
from src.service.ticketing.domain.entity.payment_entity import Payment, PaymentStatus, PaymentType
from src.service.ticketing.domain.value_object.order_metadata import OrderMetadata
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel


class PaymentQueryRepoImpl(IPaymentQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(payment_model: PaymentModel) -> Payment:
        return Payment(
            order_id=payment_model.order_id,
            resource_id=payment_model.resource_id,
            type=PaymentType(payment_model.type),
            amount=Decimal(payment_model.amount),
            discount_amount=Decimal(payment_model.discount_amount),
            final_amount=Decimal(payment_model.final_amount),
            currency=payment_model.currency,
            metadata=OrderMetadata.from_dict(payment_model.order_metadata),
            status=PaymentStatus(payment_model.status),
            gateway_payment_id=payment_model.gateway_payment_id,
            buyer_user_id=payment_model.buyer_user_id,
            failure_reason=payment_model.failure_reason,
            purchased_at=payment_model.purchased_at,
            payment_link_id=payment_model.payment_link_id,
            payment_url=payment_model.payment_url,
            created_at=payment_model.created_at,
            updated_at=payment_model.updated_at,
        )

    @Logger.io
    async def get_by_order_id(self, *, order_id: str) -> Payment | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PaymentModel).where(PaymentModel.order_id == order_id)
            )
            payment_model = result.scalar_one_or_none()
            if not payment_model:
                return None
            return self._model_to_entity(payment_model)

    @Logger.io
    async def get_by_gateway_payment_id(self, *, gateway_payment_id: str) -> Payment | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PaymentModel)
                .where(PaymentModel.gateway_payment_id == gateway_payment_id)
                .limit(1)
            )
            payment_model = result.scalar_one_or_none()
            if not payment_model:
                return None
            return self._model_to_entity(payment_model)
