from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.value_object.order_metadata import OrderMetadata


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    SUCCESS = 'success'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class PaymentType(StrEnum):
    EVENT = 'event'
    SESSION = 'session'
    OTHER = 'other'
    PRODUCT = 'product'


# The only legal edges; everything else is a no-op for the webhook handler
ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.SUCCESS, PaymentStatus.FAILED}),
    PaymentStatus.SUCCESS: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}

# Matches the failure_reason column width
FAILURE_REASON_MAX_LENGTH = 500


@attrs.define
class Payment:
    order_id: str
    resource_id: int
    type: PaymentType
    amount: Decimal
    final_amount: Decimal
    metadata: OrderMetadata
    discount_amount: Decimal = Decimal('0')
    currency: str = 'INR'
    status: PaymentStatus = PaymentStatus.PENDING
    gateway_payment_id: Optional[str] = None
    buyer_user_id: Optional[int] = None
    failure_reason: Optional[str] = None
    purchased_at: Optional[datetime] = None
    payment_link_id: Optional[str] = None
    payment_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        order_id: str,
        resource_id: int,
        type: PaymentType,
        amount: Decimal,
        metadata: OrderMetadata,
        discount_amount: Decimal = Decimal('0'),
        currency: str = 'INR',
    ) -> 'Payment':
        if amount <= 0:
            raise DomainError('Invalid payment amount')
        now = datetime.now(timezone.utc)
        return cls(
            order_id=order_id,
            resource_id=resource_id,
            type=type,
            amount=amount,
            discount_amount=discount_amount,
            final_amount=amount - discount_amount,
            currency=currency,
            metadata=metadata,
            status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    def can_transition_to(self, status: PaymentStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]

    def _ensure_transition(self, status: PaymentStatus) -> None:
        if not self.can_transition_to(status):
            raise DomainError(f'Illegal payment transition {self.status} -> {status}')

    def mark_succeeded(
        self, *, gateway_payment_id: Optional[str], at: Optional[datetime] = None
    ) -> 'Payment':
        self._ensure_transition(PaymentStatus.SUCCESS)
        now = at or datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=PaymentStatus.SUCCESS,
            gateway_payment_id=gateway_payment_id or self.gateway_payment_id,
            purchased_at=now,
            updated_at=now,
        )

    def mark_failed(self, *, reason: str, gateway_payment_id: Optional[str] = None) -> 'Payment':
        self._ensure_transition(PaymentStatus.FAILED)
        return attrs.evolve(
            self,
            status=PaymentStatus.FAILED,
            failure_reason=reason[:FAILURE_REASON_MAX_LENGTH],
            gateway_payment_id=gateway_payment_id or self.gateway_payment_id,
            updated_at=datetime.now(timezone.utc),
        )

    def mark_refunded(self) -> 'Payment':
        self._ensure_transition(PaymentStatus.REFUNDED)
        return attrs.evolve(
            self, status=PaymentStatus.REFUNDED, updated_at=datetime.now(timezone.utc)
        )

    @property
    def voucher_claim(self) -> tuple[int, list[str]] | None:
        """(voucher_id, phones) claimed by this order, if any"""
        if self.metadata.voucher_id is None or not self.metadata.voucher_claimed_phones:
            return None
        return self.metadata.voucher_id, list(self.metadata.voucher_claimed_phones)
