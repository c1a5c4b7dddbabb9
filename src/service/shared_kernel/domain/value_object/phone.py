"""
Phone number rules shared by orders, vouchers and ticket lookup.

Tickets created at different times are keyed either with or without a country-code
prefix ("919876543210" vs "9876543210"); the last 10 digits are the comparable form.
"""

import re

from email_validator import EmailNotValidError, validate_email

from src.platform.exception.exceptions import DomainError


PHONE_PATTERN = re.compile(r'^[0-9]{10,15}$')
NORMALIZED_PHONE_PATTERN = re.compile(r'^[0-9]{10}$')


def normalize_phone(phone: str) -> str:
    return phone.strip()[-10:]


def validate_phone(phone: str | None, *, field: str = 'phone') -> str:
    """Return the stripped phone or raise DomainError for anything but 10-15 digits"""
    value = (phone or '').strip()
    if not value:
        raise DomainError(f'{field} is required')
    if not PHONE_PATTERN.match(value):
        raise DomainError(f'Invalid {field}: {value}. Phone number must be 10-15 digits')
    return value


def validate_normalized_phone(phone: str | None) -> str:
    """Normalize then require exactly 10 digits (voucher ledger format)"""
    normalized = normalize_phone(phone or '')
    if not NORMALIZED_PHONE_PATTERN.match(normalized):
        raise DomainError(f'Invalid phone number: {phone}. Must be 10 digits')
    return normalized


def validate_email_address(email: str | None, *, field: str = 'email') -> str | None:
    if email is None or not email.strip():
        return None
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise DomainError(f'Invalid {field}: {email}. {e}') from e
    return result.normalized.lower()
