"""
Payment Gateway Interface

Wraps the hosted checkout provider. Implementations raise UpstreamError for any
transport or API failure.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, List

from src.service.ticketing.app.dto.gateway_dto import (
    GatewayOrder,
    GatewayPayment,
    GatewayPaymentLink,
    PaymentLinkRequest,
)


class IPaymentGateway(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def create_order(
        self, *, amount: Decimal, currency: str, receipt: str, notes: dict[str, Any]
    ) -> GatewayOrder:
        pass

    @abstractmethod
    async def fetch_order(self, *, order_id: str) -> GatewayOrder:
        pass

    @abstractmethod
    async def fetch_order_payments(self, *, order_id: str) -> List[GatewayPayment]:
        pass

    @abstractmethod
    async def create_payment_link(self, *, request: PaymentLinkRequest) -> GatewayPaymentLink:
        pass

    @abstractmethod
    def verify_webhook_signature(self, *, raw_body: bytes, signature: str | None) -> bool:
        """HMAC over the exact raw request bytes compared with the signature header"""
        pass
