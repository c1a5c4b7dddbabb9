"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_enrollment_command_repo import IEnrollmentCommandRepo
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender
from src.service.ticketing.app.interface.i_payment_command_repo import IPaymentCommandRepo
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_payment_query_repo import IPaymentQueryRepo
from src.service.ticketing.app.interface.i_qr_code_renderer import IQrCodeRenderer
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.app.interface.i_seat_reservation_handler import (
    ISeatReservationHandler,
)
from src.service.ticketing.app.interface.i_ticket_token_signer import ITicketTokenSigner
from src.service.ticketing.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.ticketing.app.interface.i_voucher_command_repo import IVoucherCommandRepo
from src.service.ticketing.app.interface.i_voucher_query_repo import IVoucherQueryRepo

__all__ = [
    'IEnrollmentCommandRepo',
    'IEnrollmentQueryRepo',
    'INotificationSender',
    'IPaymentCommandRepo',
    'IPaymentGateway',
    'IPaymentQueryRepo',
    'IQrCodeRenderer',
    'IResourceRepo',
    'ISeatReservationHandler',
    'ITicketTokenSigner',
    'IUserCommandRepo',
    'IVoucherCommandRepo',
    'IVoucherQueryRepo',
]
