"""Application layer DTOs"""

from src.service.ticketing.app.dto.gateway_dto import (
    GatewayOrder,
    GatewayPayment,
    GatewayPaymentLink,
    PaymentLinkRequest,
    to_minor_units,
)
from src.service.ticketing.app.dto.order_dto import CreateOrderCommand, CreateOrderResult
from src.service.ticketing.app.dto.ticket_dto import (
    TicketQrImage,
    TicketTokenClaims,
    VerifyTicketResult,
)
from src.service.ticketing.app.dto.voucher_dto import VoucherClaimResult, VoucherRedeemResult
from src.service.ticketing.app.dto.webhook_dto import TransitionOutcome

__all__ = [
    'CreateOrderCommand',
    'CreateOrderResult',
    'GatewayOrder',
    'GatewayPayment',
    'GatewayPaymentLink',
    'PaymentLinkRequest',
    'TicketQrImage',
    'TicketTokenClaims',
    'TransitionOutcome',
    'VerifyTicketResult',
    'VoucherClaimResult',
    'VoucherRedeemResult',
    'to_minor_units',
]
