from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.column_types import UTCDateTime
from src.platform.database.orm_db_setting import Base
from src.service.ticketing.domain.entity.payment_entity import FAILURE_REASON_MAX_LENGTH


class PaymentModel(Base):
    __tablename__ = 'payment'

    order_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    gateway_payment_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    buyer_user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    final_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default='INR', nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False, index=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(String(FAILURE_REASON_MAX_LENGTH), nullable=True)
    purchased_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    payment_link_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    payment_url: Mapped[Optional[str]] = mapped_column(String(FAILURE_REASON_MAX_LENGTH), nullable=True)
    # `metadata` is reserved on declarative classes
    order_metadata: Mapped[dict] = mapped_column('metadata', JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self):
        return f'<PaymentModel(order_id={self.order_id}, status={self.status})>'
