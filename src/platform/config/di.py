"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.service.reservation.app.command.confirm_seat_booking_use_case import (
    ConfirmSeatBookingUseCase,
)
from src.service.reservation.app.command.release_seat_reservation_use_case import (
    ReleaseSeatReservationUseCase,
)
from src.service.reservation.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.reservation.driven_adapter.repo.seat_command_repo_impl import SeatCommandRepoImpl
from src.service.ticketing.driven_adapter.gateway.mock_gateway_impl import MockGatewayImpl
from src.service.ticketing.driven_adapter.gateway.razorpay_gateway_impl import (
    RazorpayGatewayImpl,
)
from src.service.ticketing.driven_adapter.notification.notification_sender_impl import (
    NotificationSenderImpl,
)
from src.service.ticketing.driven_adapter.qr.qr_code_renderer_impl import QrCodeRendererImpl
from src.service.ticketing.driven_adapter.repo.enrollment_command_repo_impl import (
    EnrollmentCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.enrollment_query_repo_impl import (
    EnrollmentQueryRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.payment_command_repo_impl import (
    PaymentCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.payment_query_repo_impl import PaymentQueryRepoImpl
from src.service.ticketing.driven_adapter.repo.resource_repo_impl import ResourceRepoImpl
from src.service.ticketing.driven_adapter.repo.user_command_repo_impl import UserCommandRepoImpl
from src.service.ticketing.driven_adapter.repo.voucher_command_repo_impl import (
    VoucherCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.voucher_query_repo_impl import (
    VoucherQueryRepoImpl,
)
from src.service.ticketing.driven_adapter.seat_reservation_handler_impl import (
    SeatReservationHandlerImpl,
)
from src.service.ticketing.driven_adapter.security.ticket_token_signer_impl import (
    TicketTokenSignerImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from core_setting)
    database = providers.Singleton(Database)

    # Background task group (set by main.py lifespan)
    # Used for fire-and-forget tasks like ticket notifications
    task_group = providers.Object(None)

    # Repositories (stateless - use session_factory per-request)
    resource_repo = providers.Singleton(ResourceRepoImpl, session_factory=database.provided.session)
    payment_query_repo = providers.Singleton(
        PaymentQueryRepoImpl, session_factory=database.provided.session
    )
    payment_command_repo = providers.Singleton(
        PaymentCommandRepoImpl, session_factory=database.provided.session
    )
    voucher_query_repo = providers.Singleton(
        VoucherQueryRepoImpl, session_factory=database.provided.session
    )
    voucher_command_repo = providers.Singleton(
        VoucherCommandRepoImpl, session_factory=database.provided.session
    )
    enrollment_query_repo = providers.Singleton(
        EnrollmentQueryRepoImpl, session_factory=database.provided.session
    )
    enrollment_command_repo = providers.Singleton(
        EnrollmentCommandRepoImpl, session_factory=database.provided.session
    )
    user_command_repo = providers.Singleton(
        UserCommandRepoImpl, session_factory=database.provided.session
    )

    # Payment gateway (PAYMENT_GATEWAY=mock|razorpay)
    payment_gateway = providers.Selector(
        providers.Callable(lambda: settings.PAYMENT_GATEWAY),
        mock=providers.Singleton(MockGatewayImpl),
        razorpay=providers.Singleton(RazorpayGatewayImpl),
    )

    # Outbound side effects
    notification_sender = providers.Singleton(NotificationSenderImpl)
    ticket_token_signer = providers.Singleton(TicketTokenSignerImpl)
    qr_code_renderer = providers.Singleton(QrCodeRendererImpl)

    # Reservation Service - seat holds (PostgreSQL guarded updates)
    seat_command_repo = providers.Singleton(
        SeatCommandRepoImpl, session_factory=database.provided.session
    )
    reserve_seats_use_case = providers.Singleton(
        ReserveSeatsUseCase, seat_command_repo=seat_command_repo
    )
    confirm_seat_booking_use_case = providers.Singleton(
        ConfirmSeatBookingUseCase, seat_command_repo=seat_command_repo
    )
    release_seat_reservation_use_case = providers.Singleton(
        ReleaseSeatReservationUseCase, seat_command_repo=seat_command_repo
    )

    # Ticketing Service - handshake with the reservation service
    seat_reservation_handler = providers.Singleton(
        SeatReservationHandlerImpl,
        reserve_seats_use_case=reserve_seats_use_case,
        confirm_seat_booking_use_case=confirm_seat_booking_use_case,
        release_seat_reservation_use_case=release_seat_reservation_use_case,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
