"""Payment gateway request/result DTOs."""

from decimal import Decimal
from typing import Any, Optional

import attrs


@attrs.define(frozen=True)
class GatewayOrder:
    id: str
    amount_minor: int  # paise
    currency: str
    status: str  # created/attempted/paid
    receipt: Optional[str] = None
    notes: dict[str, Any] = attrs.field(factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.status == 'paid'


@attrs.define(frozen=True)
class GatewayPayment:
    id: str
    order_id: str
    status: str  # created/authorized/captured/failed/refunded
    amount_minor: int = 0


@attrs.define(frozen=True)
class GatewayPaymentLink:
    id: str
    short_url: str
    status: str = 'created'


@attrs.define(frozen=True)
class PaymentLinkRequest:
    order_id: str
    amount: Decimal
    currency: str
    description: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    callback_url: Optional[str] = None
    notes: dict[str, Any] = attrs.field(factory=dict)


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())
