"""
Reserve Seats Use Case - all-or-nothing hold of the seats picked for an order
"""

from datetime import datetime, timedelta, timezone

from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import DomainError, SeatUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.dto import ReservationRequest, ReservationResult
from src.service.reservation.app.interface import ISeatCommandRepo


class ReserveSeatsUseCase:
    """
    Flow:
    1. Validate the selection (non-empty, no duplicate labels)
    2. Sweep expired reservations of the resource back to AVAILABLE
    3. Reserve every seat for SEAT_RESERVATION_TTL_MINUTES, or none of them
    """

    def __init__(self, seat_command_repo: ISeatCommandRepo) -> None:
        self.seat_command_repo = seat_command_repo
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def reserve_seats(self, request: ReservationRequest) -> ReservationResult:
        with self.tracer.start_as_current_span(
            'use_case.reserve_seats',
            attributes={
                'order.id': request.order_id,
                'resource.id': request.resource_id,
                'seat.quantity': len(request.holds),
            },
        ):
            labels = [hold.seat_label for hold in request.holds]
            if not labels:
                raise DomainError('Seat selection is required for this event')
            duplicates = sorted({label for label in labels if labels.count(label) > 1})
            if duplicates:
                raise DomainError(f'Duplicate seat selection: {", ".join(duplicates)}')

            now = datetime.now(timezone.utc)
            swept = await self.seat_command_repo.sweep_expired(
                resource_id=request.resource_id, now=now
            )
            if swept:
                Logger.base.info(f'🧹 [SEAT] Swept {swept} expired reservation(s)')

            expires_at = now + timedelta(minutes=settings.SEAT_RESERVATION_TTL_MINUTES)
            unavailable = await self.seat_command_repo.reserve(
                resource_id=request.resource_id,
                holds=request.holds,
                order_id=request.order_id,
                expires_at=expires_at,
                now=now,
            )
            if unavailable:
                raise SeatUnavailableError(
                    f'Selected seats are no longer available: {", ".join(unavailable)}',
                    unavailable=unavailable,
                )

            return ReservationResult(
                order_id=request.order_id, seat_labels=labels, expires_at=expires_at
            )
