"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    claim_voucher_use_case,
    complete_mock_payment_use_case,
    create_enrollment_use_case,
    create_order_use_case,
    handle_payment_webhook_use_case,
    notify_ticket_holders_use_case,
    notify_voucher_holders_use_case,
    redeem_voucher_use_case,
    reverse_enrollment_use_case,
    settle_payment_use_case,
    verify_ticket_use_case,
)
from src.service.ticketing.app.query import (
    generate_ticket_qr_use_case,
    get_payment_status_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    create_order_use_case,
    create_enrollment_use_case,
    reverse_enrollment_use_case,
    notify_ticket_holders_use_case,
    notify_voucher_holders_use_case,
    settle_payment_use_case,
    handle_payment_webhook_use_case,
    complete_mock_payment_use_case,
    claim_voucher_use_case,
    redeem_voucher_use_case,
    verify_ticket_use_case,
    get_payment_status_use_case,
    generate_ticket_qr_use_case,
]
