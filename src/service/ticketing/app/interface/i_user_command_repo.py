from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.user_entity import User


class IUserCommandRepo(ABC):
    @abstractmethod
    async def get_or_create(self, *, phone: str, name: str, email: str | None) -> User:
        """
        Resolve a user by normalized phone, creating it if missing

        A concurrent insert that trips the unique constraint is resolved by re-fetching
        the conflicting row (by phone, then by email) instead of failing.
        """
        pass
