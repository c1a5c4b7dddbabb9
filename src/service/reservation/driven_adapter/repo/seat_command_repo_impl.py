"""
Seat Command Repository Implementation

Each seat is won with its own guarded UPDATE (AVAILABLE, or RESERVED past expiry).
All updates share one transaction; a single lost seat rolls the whole hold back.
"""

from datetime import datetime
from typing import AsyncContextManager, Callable, List

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface.i_seat_command_repo import ISeatCommandRepo
from src.service.reservation.domain.entity.seat_entity import Seat, SeatHold, SeatStatus
from src.service.reservation.driven_adapter.model.seat_model import SeatModel
from src.service.shared_kernel.domain.value_object.phone import normalize_phone


_CLEARED_HOLD = {
    'order_id': None,
    'reserved_by_phone': None,
    'reservation_expires_at': None,
}


class SeatCommandRepoImpl(ISeatCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(seat_model: SeatModel) -> Seat:
        return Seat(
            resource_id=seat_model.resource_id,
            seat_label=seat_model.seat_label,
            status=SeatStatus(seat_model.status),
            order_id=seat_model.order_id,
            reserved_by_phone=seat_model.reserved_by_phone,
            reservation_expires_at=seat_model.reservation_expires_at,
        )

    @Logger.io
    async def sweep_expired(self, *, resource_id: int, now: datetime) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                update(SeatModel)
                .where(
                    SeatModel.resource_id == resource_id,
                    SeatModel.status == SeatStatus.RESERVED.value,
                    SeatModel.reservation_expires_at < now,
                )
                .values(status=SeatStatus.AVAILABLE.value, **_CLEARED_HOLD)
            )
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]

    @Logger.io
    async def reserve(
        self,
        *,
        resource_id: int,
        holds: List[SeatHold],
        order_id: str,
        expires_at: datetime,
        now: datetime,
    ) -> List[str]:
        labels = [hold.seat_label for hold in holds]

        async with self.session_factory() as session:
            lost: List[str] = []
            for hold in holds:
                result = await session.execute(
                    update(SeatModel)
                    .where(
                        SeatModel.resource_id == resource_id,
                        SeatModel.seat_label == hold.seat_label,
                        or_(
                            SeatModel.status == SeatStatus.AVAILABLE.value,
                            and_(
                                SeatModel.status == SeatStatus.RESERVED.value,
                                SeatModel.reservation_expires_at < now,
                            ),
                        ),
                    )
                    .values(
                        status=SeatStatus.RESERVED.value,
                        order_id=order_id,
                        reserved_by_phone=normalize_phone(hold.phone) if hold.phone else None,
                        reservation_expires_at=expires_at,
                    )
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    lost.append(hold.seat_label)

            if not lost:
                await session.commit()
                Logger.base.info(
                    f'💺 [SEAT] Reserved {len(labels)} seat(s) for order {order_id}: {labels}'
                )
                return []

            await session.rollback()

            result = await session.execute(
                select(SeatModel).where(
                    SeatModel.resource_id == resource_id, SeatModel.seat_label.in_(lost)
                )
            )
            found = {model.seat_label: self._model_to_entity(model) for model in result.scalars()}
            return [
                found[label].unavailable_reason if label in found else f'{label} (not found)'
                for label in lost
            ]

    @Logger.io
    async def confirm(self, *, order_id: str) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                update(SeatModel)
                .where(
                    SeatModel.order_id == order_id,
                    SeatModel.status == SeatStatus.RESERVED.value,
                )
                .values(status=SeatStatus.BOOKED.value, reservation_expires_at=None)
            )
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]

    @Logger.io
    async def release(self, *, order_id: str) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                update(SeatModel)
                .where(
                    SeatModel.order_id == order_id,
                    SeatModel.status == SeatStatus.RESERVED.value,
                )
                .values(status=SeatStatus.AVAILABLE.value, **_CLEARED_HOLD)
            )
            await session.commit()
            return result.rowcount  # type: ignore[attr-defined]
