import hmac

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError


bearer_scheme = HTTPBearer(auto_error=False)


async def require_staff(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    x_admin_id: str | None = Header(default=None),
) -> str:
    """Gate staff-only ticket endpoints; returns the admin id recorded on scans"""
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span('auth.require_staff'):
        if credentials is None:
            raise AuthenticationError('Not authenticated', code='NOT_AUTHENTICATED')

        expected = settings.STAFF_API_TOKEN.get_secret_value()
        if not expected or not hmac.compare_digest(credentials.credentials, expected):
            raise AuthenticationError('Invalid staff token', code='INVALID_STAFF_TOKEN')

        return (x_admin_id or '').strip() or 'staff'
