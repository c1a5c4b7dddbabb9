from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.column_types import UTCDateTime
from src.platform.database.orm_db_setting import Base


class SeatModel(Base):
    __tablename__ = 'seat'

    resource_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    seat_label: Mapped[str] = mapped_column(String(10), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), default='available', nullable=False)
    order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    reserved_by_phone: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    reservation_expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    def __repr__(self):
        return f'<SeatModel({self.resource_id}:{self.seat_label}, status={self.status})>'
