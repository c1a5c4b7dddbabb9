from datetime import datetime
from typing import List

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.column_types import UTCDateTime
from src.platform.database.orm_db_setting import Base


class VoucherClaimModel(Base):
    __tablename__ = 'voucher_claim'

    voucher_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('voucher.id', ondelete='CASCADE'), primary_key=True
    )
    phone: Mapped[str] = mapped_column(String(10), primary_key=True, index=True)
    claimed_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )


class VoucherModel(Base):
    __tablename__ = 'voucher'
    __table_args__ = (
        CheckConstraint('claimed_count <= max_usage', name='ck_voucher_claimed_within_max'),
        CheckConstraint('usage_count <= max_usage', name='ck_voucher_usage_within_max'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default='')
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default='')
    max_usage: Mapped[int] = mapped_column(Integer, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Denormalized size of voucher_claim rows; carries the claim guard
    claimed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    applicable_resources: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )

    claims: Mapped[List[VoucherClaimModel]] = relationship(
        lazy='selectin', order_by=VoucherClaimModel.claimed_at, viewonly=True
    )

    def __repr__(self):
        return f'<VoucherModel(id={self.id}, code={self.code}, claimed={self.claimed_count}/{self.max_usage})>'
