"""Ticket token and verification DTOs."""

from datetime import datetime
from typing import Optional

import attrs


@attrs.define(frozen=True)
class TicketTokenClaims:
    enrollment_id: str
    buyer_user_id: int
    resource_id: int
    phone: str
    issued_at: datetime


@attrs.define(frozen=True)
class TicketQrImage:
    content: bytes
    filename: str
    verify_url: str
    media_type: str = 'image/png'


@attrs.define(frozen=True)
class VerifyTicketResult:
    enrollment_id: str
    resource_id: int
    phone: str
    status: str
    already_scanned: bool
    scanned_at: Optional[datetime]
    scanned_by_admin_id: Optional[str]
    assigned_seat: Optional[str] = None

    @property
    def message(self) -> str:
        return 'Ticket already scanned' if self.already_scanned else 'Entry granted'
