import secrets
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.app.dto.webhook_dto import TransitionOutcome
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway


class CompleteMockPaymentUseCase:
    """Checkout page stand-in for the mock gateway: paying settles the order immediately."""

    def __init__(
        self, *, payment_gateway: IPaymentGateway, settle_payment_use_case: SettlePaymentUseCase
    ) -> None:
        self.payment_gateway = payment_gateway
        self.settle_payment_use_case = settle_payment_use_case

    @classmethod
    @inject
    def depends(
        cls,
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settle_payment_use_case: SettlePaymentUseCase = Depends(SettlePaymentUseCase.depends),
    ) -> Self:
        return cls(payment_gateway=payment_gateway, settle_payment_use_case=settle_payment_use_case)

    @Logger.io
    async def execute(self, *, order_id: str) -> TransitionOutcome:
        if self.payment_gateway.name != 'mock':
            raise NotFoundError('Mock payments are disabled')

        await self.payment_gateway.fetch_order(order_id=order_id)
        outcome = await self.settle_payment_use_case.mark_succeeded(
            order_id=order_id, gateway_payment_id=f'pay_mock_{secrets.token_hex(6)}'
        )
        Logger.base.info(f'🧪 [MOCK] Payment for {order_id} completed: {outcome.value}')
        return outcome
