from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.entity.enrollment_entity import EventEnrollment


class IEnrollmentQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, enrollment_id: str) -> EventEnrollment | None:
        pass

    @abstractmethod
    async def get_by_id_and_resource(
        self, *, enrollment_id: str, resource_id: int
    ) -> EventEnrollment | None:
        pass

    @abstractmethod
    async def get_by_buyer_and_resource(
        self, *, buyer_user_id: int, resource_id: int
    ) -> EventEnrollment | None:
        pass

    @abstractmethod
    async def get_by_order_id(self, *, order_id: str) -> EventEnrollment | None:
        pass

    @abstractmethod
    async def find_active_ticket_phones(self, *, resource_id: int, phones: List[str]) -> List[str]:
        """
        Return which of ``phones`` (compared in normalized form) already hold an ACTIVE
        ticket in any enrollment of the resource
        """
        pass
