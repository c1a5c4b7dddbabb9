"""
Voucher Command Repository Interface

Four atomic state transitions over the phone-indexed claim list. Each one is a single
conditional UPDATE/DELETE executed in one transaction; none reads the voucher first.
"""

from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.entity.voucher_entity import Voucher


class IVoucherCommandRepo(ABC):
    @abstractmethod
    async def claim(self, *, voucher_id: int, phones: List[str]) -> Voucher | None:
        """
        Reserve one slot per phone if the pool still has room for all of them

        Returns:
            Updated voucher, or None when the pool is exhausted, the voucher is inactive,
            or one of the phones already holds a slot (caller lost the race)
        """
        pass

    @abstractmethod
    async def release(self, *, voucher_id: int, phones: List[str]) -> int:
        """
        Give slots back; usage_count is untouched

        Returns:
            Number of phones actually released
        """
        pass

    @abstractmethod
    async def confirm(self, *, voucher_id: int, count: int) -> bool:
        """Add ``count`` paid usages, guarded by usage_count + count <= max_usage"""
        pass

    @abstractmethod
    async def redeem(self, *, phone: str) -> Voucher | None:
        """
        Remove the phone from the first voucher holding it

        Returns:
            The voucher after removal, or None if no voucher holds the phone
        """
        pass
