from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Index, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.column_types import UTCDateTime
from src.platform.database.orm_db_setting import Base
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel


class EventEnrollmentModel(Base):
    __tablename__ = 'event_enrollment'
    __table_args__ = (
        UniqueConstraint('buyer_user_id', 'resource_id', name='uq_enrollment_buyer_resource'),
        Index('ix_enrollment_order_id', 'order_id', unique=True),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID7
    order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    payment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    buyer_user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    ticket_count: Mapped[int] = mapped_column(Integer, nullable=False)
    ticket_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )

    tickets: Mapped[List[TicketModel]] = relationship(
        back_populates='enrollment',
        lazy='selectin',
        cascade='all, delete-orphan',
        order_by=TicketModel.id,
    )
