from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.reservation.app.interface import ISeatCommandRepo


class ConfirmSeatBookingUseCase:
    """RESERVED -> BOOKED for the seats of a paid order"""

    def __init__(self, seat_command_repo: ISeatCommandRepo) -> None:
        self.seat_command_repo = seat_command_repo
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def confirm(self, *, order_id: str) -> int:
        with self.tracer.start_as_current_span(
            'use_case.confirm_seat_booking', attributes={'order.id': order_id}
        ):
            booked = await self.seat_command_repo.confirm(order_id=order_id)
            if booked:
                Logger.base.info(f'✅ [SEAT] Booked {booked} seat(s) for order {order_id}')
            else:
                Logger.base.warning(f'⚠️ [SEAT] No reserved seats to book for order {order_id}')
            return booked
