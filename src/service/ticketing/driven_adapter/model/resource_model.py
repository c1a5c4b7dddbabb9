from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.column_types import UTCDateTime
from src.platform.database.orm_db_setting import Base


class ResourceModel(Base):
    __tablename__ = 'resource'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default='event', nullable=False)
    is_live: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    booking_start_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    booking_end_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    end_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    # [{"id": "early", "name": "Early Bird", "price": "499.00", "compare_at_price": "799.00"}]
    pricing_tiers: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    has_seat_arrangement: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tickets_sold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f'<ResourceModel(id={self.id}, name={self.name}, available={self.available_seats})>'
