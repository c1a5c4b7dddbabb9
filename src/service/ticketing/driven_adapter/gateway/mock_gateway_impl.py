"""
Mock Gateway Implementation

Local stand-in for development and tests (PAYMENT_GATEWAY=mock). Orders live in process
memory and are never paid on their own; send a signed webhook to move them along.
"""

import secrets
import time
from decimal import Decimal
from typing import Any, List

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.gateway_dto import (
    GatewayOrder,
    GatewayPayment,
    GatewayPaymentLink,
    PaymentLinkRequest,
    to_minor_units,
)
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.driven_adapter.gateway.webhook_signature import is_valid_signature


class MockGatewayImpl(IPaymentGateway):
    def __init__(self, *, webhook_secret: str | None = None) -> None:
        self._webhook_secret = (
            webhook_secret
            if webhook_secret is not None
            else settings.RAZORPAY_WEBHOOK_SECRET.get_secret_value()
        )
        self._orders: dict[str, GatewayOrder] = {}

    @property
    def name(self) -> str:
        return 'mock'

    @Logger.io
    async def create_order(
        self, *, amount: Decimal, currency: str, receipt: str, notes: dict[str, Any]
    ) -> GatewayOrder:
        order = GatewayOrder(
            id=f'order_mock_{int(time.time())}_{secrets.token_hex(4)}',
            amount_minor=to_minor_units(amount),
            currency=currency,
            status='created',
            receipt=receipt,
            notes=notes,
        )
        self._orders[order.id] = order
        return order

    @Logger.io
    async def fetch_order(self, *, order_id: str) -> GatewayOrder:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError(f'Mock order {order_id} not found')
        return order

    @Logger.io
    async def fetch_order_payments(self, *, order_id: str) -> List[GatewayPayment]:
        return []

    @Logger.io
    async def create_payment_link(self, *, request: PaymentLinkRequest) -> GatewayPaymentLink:
        base_url = settings.PUBLIC_BASE_URL.rstrip('/')
        return GatewayPaymentLink(
            id=f'plink_mock_{secrets.token_hex(6)}',
            short_url=f'{base_url}/mock-payment/{request.order_id}',
        )

    def verify_webhook_signature(self, *, raw_body: bytes, signature: str | None) -> bool:
        return is_valid_signature(
            raw_body=raw_body, signature=signature, secret=self._webhook_secret
        )
