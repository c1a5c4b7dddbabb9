"""Shared Kernel Value Objects"""

from src.service.shared_kernel.domain.value_object.phone import (
    normalize_phone,
    validate_email_address,
    validate_normalized_phone,
    validate_phone,
)

__all__ = [
    'normalize_phone',
    'validate_email_address',
    'validate_normalized_phone',
    'validate_phone',
]
