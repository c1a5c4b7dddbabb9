from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.column_types import UTCDateTime
from src.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from src.service.ticketing.driven_adapter.model.enrollment_model import EventEnrollmentModel


class TicketModel(Base):
    __tablename__ = 'enrollment_ticket'
    __table_args__ = (
        UniqueConstraint('enrollment_id', 'phone', name='uq_ticket_enrollment_phone'),
        Index('ix_ticket_resource_phone_status', 'resource_id', 'normalized_phone', 'status'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    enrollment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('event_enrollment.id', ondelete='CASCADE'), nullable=False
    )
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False)
    # Key as submitted at checkout (may carry a country code)
    phone: Mapped[str] = mapped_column(String(15), nullable=False)
    normalized_phone: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='active', nullable=False)
    assigned_seat: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_scanned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    scanned_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    scanned_by_admin_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    enrollment: Mapped['EventEnrollmentModel'] = relationship(back_populates='tickets')
