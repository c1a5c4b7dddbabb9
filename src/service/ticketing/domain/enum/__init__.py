"""Ticketing Domain Enums"""

from src.service.ticketing.domain.enum.gateway_event import GatewayEvent

__all__ = ['GatewayEvent']
