from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.enrollment_entity import EventEnrollment, Ticket


class IEnrollmentCommandRepo(ABC):
    @abstractmethod
    async def create_if_absent(self, *, enrollment: EventEnrollment) -> tuple[EventEnrollment, bool]:
        """
        Insert the enrollment with its tickets unless (buyer, resource) already has one

        Returns:
            (stored enrollment, created) - created is False when an existing row won
        """
        pass

    @abstractmethod
    async def record_scan(self, *, enrollment_id: str, ticket: Ticket) -> tuple[Ticket, bool]:
        """
        Write the first scan of an ACTIVE ticket

        Returns:
            (stored ticket, won) - won is False when the row was already scanned or is no
            longer ACTIVE; the stored ticket then carries the first scan's metadata
        """
        pass

    @abstractmethod
    async def save_tickets(self, *, enrollment: EventEnrollment) -> None:
        """Persist status fields of every ticket of the enrollment"""
        pass
