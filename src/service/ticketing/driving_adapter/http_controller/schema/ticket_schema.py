from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TicketVerifyResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'message': 'Entry granted',
                'enrollment_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'resource_id': 1,
                'phone': '9876543210',
                'status': 'active',
                'already_scanned': False,
                'scanned_at': '2025-01-10T19:05:00Z',
                'scanned_by_admin_id': 'gate-2',
                'assigned_seat': 'A1',
            }
        },
    }

    message: str
    enrollment_id: str
    resource_id: int
    phone: str
    status: str
    already_scanned: bool
    scanned_at: Optional[datetime] = None
    scanned_by_admin_id: Optional[str] = None
    assigned_seat: Optional[str] = None
