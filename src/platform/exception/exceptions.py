from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(
        self,
        message: str,
        status_code: int,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400, *, code: str | None = None) -> None:
        super().__init__(message, status_code, code=code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message, 404, code=code)


class ConflictError(CustomBaseError):
    def __init__(
        self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, 409, code=code, details=details)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message, 401, code=code)


class UpstreamError(CustomBaseError):
    """Payment gateway or other third-party call failed"""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code, code='UPSTREAM_ERROR')


class TokenExpiredError(AuthenticationError):
    def __init__(self, message: str = 'Ticket token has expired') -> None:
        super().__init__(message, code='TOKEN_EXPIRED')


class InvalidTokenError(AuthenticationError):
    def __init__(self, message: str = 'Invalid ticket token') -> None:
        super().__init__(message, code='INVALID_TOKEN')


class SeatUnavailableError(ConflictError):
    def __init__(self, message: str, *, unavailable: list[str] | None = None) -> None:
        super().__init__(
            message, code='SEAT_UNAVAILABLE', details={'unavailable_seats': unavailable or []}
        )


class VoucherExhaustedError(ConflictError):
    def __init__(self, *, available_slots: int, required_slots: int) -> None:
        super().__init__(
            'Unlucky, we ran out of vouchers!',
            code='VOUCHER_EXHAUSTED',
            details={'available_slots': available_slots, 'required_slots': required_slots},
        )
