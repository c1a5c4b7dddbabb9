"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.enrollment_model import EventEnrollmentModel
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.ticketing.driven_adapter.model.resource_model import ResourceModel
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel
from src.service.ticketing.driven_adapter.model.user_model import UserModel
from src.service.ticketing.driven_adapter.model.voucher_model import (
    VoucherClaimModel,
    VoucherModel,
)

__all__ = [
    'EventEnrollmentModel',
    'PaymentModel',
    'ResourceModel',
    'TicketModel',
    'UserModel',
    'VoucherClaimModel',
    'VoucherModel',
]
