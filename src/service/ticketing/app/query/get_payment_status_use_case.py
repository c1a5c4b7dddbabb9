from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import CustomBaseError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_payment_query_repo import IPaymentQueryRepo
from src.service.ticketing.domain.entity.payment_entity import Payment, PaymentStatus


class GetPaymentStatusUseCase:
    """
    Status poll for the checkout page.

    A PENDING payment is checked once against the gateway; a paid gateway order goes
    through the same SUCCESS transition the webhook uses, so a late webhook is a no-op.
    """

    def __init__(
        self,
        *,
        payment_query_repo: IPaymentQueryRepo,
        payment_gateway: IPaymentGateway,
        settle_payment_use_case: SettlePaymentUseCase,
    ) -> None:
        self.payment_query_repo = payment_query_repo
        self.payment_gateway = payment_gateway
        self.settle_payment_use_case = settle_payment_use_case

    @classmethod
    @inject
    def depends(
        cls,
        payment_query_repo: IPaymentQueryRepo = Depends(Provide[Container.payment_query_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settle_payment_use_case: SettlePaymentUseCase = Depends(SettlePaymentUseCase.depends),
    ) -> Self:
        return cls(
            payment_query_repo=payment_query_repo,
            payment_gateway=payment_gateway,
            settle_payment_use_case=settle_payment_use_case,
        )

    @Logger.io
    async def execute(self, *, order_id: str) -> Payment:
        payment = await self.payment_query_repo.get_by_order_id(order_id=order_id)
        if not payment:
            raise NotFoundError('Payment not found')

        if payment.status != PaymentStatus.PENDING:
            return payment

        try:
            await self._resync(order_id=order_id)
        except CustomBaseError as e:
            Logger.base.warning(f'⚠️ [STATUS] Resync of {order_id} failed: {e.message}')
            return payment

        return await self.payment_query_repo.get_by_order_id(order_id=order_id) or payment

    async def _resync(self, *, order_id: str) -> None:
        gateway_order = await self.payment_gateway.fetch_order(order_id=order_id)
        if not gateway_order.is_paid:
            return

        # One upstream call per poll; the payment id arrives with the webhook
        outcome = await self.settle_payment_use_case.mark_succeeded(
            order_id=order_id, gateway_payment_id=None
        )
        Logger.base.info(f'🔄 [STATUS] Gateway reports {order_id} paid, resync {outcome.value}')
