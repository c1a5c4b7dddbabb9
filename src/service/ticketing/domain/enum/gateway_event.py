from enum import StrEnum


class GatewayEvent(StrEnum):
    """Webhook event names sent by the payment gateway"""

    PAYMENT_CAPTURED = 'payment.captured'
    PAYMENT_FAILED = 'payment.failed'
    ORDER_PAID = 'order.paid'
    PAYMENT_LINK_PAID = 'payment_link.paid'
    PAYMENT_LINK_CANCELLED = 'payment_link.cancelled'
    PAYMENT_LINK_EXPIRED = 'payment_link.expired'
    REFUND_CREATED = 'refund.created'
    REFUND_PROCESSED = 'refund.processed'
