from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import ISeatCommandRepo


class ReleaseSeatReservationUseCase:
    """RESERVED -> AVAILABLE for an order that failed or was rolled back"""

    def __init__(self, seat_command_repo: ISeatCommandRepo) -> None:
        self.seat_command_repo = seat_command_repo
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def release(self, *, order_id: str) -> int:
        with self.tracer.start_as_current_span(
            'use_case.release_seat_reservation', attributes={'order.id': order_id}
        ):
            released = await self.seat_command_repo.release(order_id=order_id)
            if released:
                Logger.base.info(f'🔓 [SEAT] Released {released} seat(s) for order {order_id}')
            return released
