from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import DomainError, SeatUnavailableError
from src.service.reservation.app.command.confirm_seat_booking_use_case import (
    ConfirmSeatBookingUseCase,
)
from src.service.reservation.app.command.release_seat_reservation_use_case import (
    ReleaseSeatReservationUseCase,
)
from src.service.reservation.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.reservation.app.dto import ReservationRequest
from src.service.reservation.domain.entity.seat_entity import SeatHold


@pytest.fixture
def seat_command_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.sweep_expired.return_value = 0
    repo.reserve.return_value = []
    return repo


@pytest.mark.unit
class TestReserveSeatsUseCase:
    @pytest.mark.asyncio
    async def test_reserve__holds_every_seat(self, seat_command_repo: AsyncMock) -> None:
        # Arrange
        use_case = ReserveSeatsUseCase(seat_command_repo=seat_command_repo)
        request = ReservationRequest(
            resource_id=7,
            order_id='order_001',
            holds=[SeatHold(seat_label=' a1 ', phone='9876543210'), SeatHold(seat_label='A2')],
        )

        # Act
        result = await use_case.reserve_seats(request)

        # Assert
        assert result.seat_labels == ['A1', 'A2']
        seat_command_repo.sweep_expired.assert_awaited_once()
        kwargs = seat_command_repo.reserve.await_args.kwargs
        assert kwargs['order_id'] == 'order_001'
        assert kwargs['expires_at'] > kwargs['now']

    @pytest.mark.asyncio
    async def test_reserve__unavailable_seat_raises_conflict(
        self, seat_command_repo: AsyncMock
    ) -> None:
        seat_command_repo.reserve.return_value = ['A2 (BOOKED)']
        use_case = ReserveSeatsUseCase(seat_command_repo=seat_command_repo)

        with pytest.raises(SeatUnavailableError) as exc_info:
            await use_case.reserve_seats(
                ReservationRequest(
                    resource_id=7,
                    order_id='order_001',
                    holds=[SeatHold(seat_label='A1'), SeatHold(seat_label='A2')],
                )
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {'unavailable_seats': ['A2 (BOOKED)']}

    @pytest.mark.asyncio
    async def test_reserve__duplicate_labels_rejected(self, seat_command_repo: AsyncMock) -> None:
        use_case = ReserveSeatsUseCase(seat_command_repo=seat_command_repo)

        with pytest.raises(DomainError, match='Duplicate seat selection: A1'):
            await use_case.reserve_seats(
                ReservationRequest(
                    resource_id=7,
                    order_id='order_001',
                    holds=[SeatHold(seat_label='A1'), SeatHold(seat_label='a1')],
                )
            )

        seat_command_repo.reserve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reserve__empty_selection_rejected(self, seat_command_repo: AsyncMock) -> None:
        use_case = ReserveSeatsUseCase(seat_command_repo=seat_command_repo)

        with pytest.raises(DomainError):
            await use_case.reserve_seats(
                ReservationRequest(resource_id=7, order_id='order_001', holds=[])
            )


@pytest.mark.unit
class TestConfirmAndRelease:
    @pytest.mark.asyncio
    async def test_confirm(self, seat_command_repo: AsyncMock) -> None:
        seat_command_repo.confirm.return_value = 2

        booked = await ConfirmSeatBookingUseCase(seat_command_repo=seat_command_repo).confirm(
            order_id='order_001'
        )

        assert booked == 2
        seat_command_repo.confirm.assert_awaited_once_with(order_id='order_001')

    @pytest.mark.asyncio
    async def test_release(self, seat_command_repo: AsyncMock) -> None:
        seat_command_repo.release.return_value = 1

        released = await ReleaseSeatReservationUseCase(
            seat_command_repo=seat_command_repo
        ).release(order_id='order_001')

        assert released == 1
