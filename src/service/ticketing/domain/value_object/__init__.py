"""Ticketing Domain Value Objects"""

from src.service.ticketing.domain.value_object.order_metadata import (
    OrderMetadata,
    Party,
    SelectedSeat,
)

__all__ = ['OrderMetadata', 'Party', 'SelectedSeat']
