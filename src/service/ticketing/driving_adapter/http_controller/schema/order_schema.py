from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class PartySchema(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    phone: str
    email: Optional[str] = None


class SelectedSeatSchema(BaseModel):
    seat_label: str = Field(min_length=1, max_length=20)
    phone: str


class OrderCreateRequest(BaseModel):
    buyer: PartySchema
    attendees: List[PartySchema] = []
    resource_id: int
    tier_id: Optional[str] = None
    voucher_code: Optional[str] = None
    selected_seats: List[SelectedSeatSchema] = []

    class Config:
        json_schema_extra = {
            'examples': [
                {
                    'buyer': {'name': 'Asha', 'phone': '9876543210', 'email': 'asha@example.com'},
                    'attendees': [{'name': 'Ravi', 'phone': '9123456780'}],
                    'resource_id': 1,
                    'tier_id': 'early-bird',
                    'voucher_code': 'FREEDRINK',
                },
                {
                    'buyer': {'name': 'Asha', 'phone': '9876543210'},
                    'resource_id': 2,
                    'selected_seats': [{'seat_label': 'A1', 'phone': '9876543210'}],
                },
            ]
        }


class OrderCreateResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'order_id': 'order_mock_1736500000_9f2c4e1a',
                'payment_url': 'http://localhost:8000/mock-payment/order_mock_1736500000_9f2c4e1a',
                'payment_link_id': 'plink_mock_1736500000_4b7d',
                'amount': '998.00',
                'per_ticket_price': '499.00',
                'total_tickets': 2,
                'currency': 'INR',
                'status': 'pending',
                'claimed_voucher_phones': ['9876543210'],
            }
        },
    }

    order_id: str
    payment_url: str
    payment_link_id: str
    amount: Decimal
    per_ticket_price: Decimal
    total_tickets: int
    currency: str
    status: str
    claimed_voucher_phones: List[str] = []


class PaymentStatusResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'order_id': 'order_mock_1736500000_9f2c4e1a',
                'gateway_payment_id': 'pay_Nx81kq2',
                'status': 'success',
                'amount': '998.00',
                'failure_reason': None,
                'purchased_at': '2025-01-10T10:35:00Z',
            }
        },
    }

    order_id: str
    gateway_payment_id: Optional[str] = None
    status: str
    amount: Decimal
    failure_reason: Optional[str] = None
    purchased_at: Optional[datetime] = None
