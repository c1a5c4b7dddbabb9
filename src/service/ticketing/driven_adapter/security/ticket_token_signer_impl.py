from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import InvalidTokenError, TokenExpiredError
from src.service.ticketing.app.dto.ticket_dto import TicketTokenClaims
from src.service.ticketing.app.interface.i_ticket_token_signer import ITicketTokenSigner


class TicketTokenSignerImpl(ITicketTokenSigner):
    """HS256 JWT carried inside the ticket QR code"""

    def __init__(
        self,
        *,
        secret: str | None = None,
        algorithm: str | None = None,
        expire_days: int | None = None,
    ) -> None:
        self._secret = secret or settings.SECRET_KEY.get_secret_value()
        self._algorithm = algorithm or settings.ALGORITHM
        self._expire_days = expire_days or settings.TICKET_TOKEN_EXPIRE_DAYS

    def sign(self, *, claims: TicketTokenClaims) -> str:
        payload: dict[str, Any] = {
            'enrollment_id': claims.enrollment_id,
            'buyer_user_id': claims.buyer_user_id,
            'resource_id': claims.resource_id,
            'phone': claims.phone,
            'issued_at': claims.issued_at.isoformat(),
            'exp': int((claims.issued_at + timedelta(days=self._expire_days)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, *, token: str) -> TicketTokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e

        try:
            issued_at = (
                datetime.fromisoformat(payload['issued_at'])
                if payload.get('issued_at')
                else datetime.now(timezone.utc)
            )
            # Phone is checked by the caller so a phoneless token maps to a validation error
            return TicketTokenClaims(
                enrollment_id=str(payload['enrollment_id']),
                buyer_user_id=int(payload['buyer_user_id']),
                resource_id=int(payload['resource_id']),
                phone=str(payload.get('phone') or ''),
                issued_at=issued_at,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError() from e
