"""Reservation Service Interfaces"""

from src.service.reservation.app.interface.i_seat_command_repo import ISeatCommandRepo

__all__ = ['ISeatCommandRepo']
