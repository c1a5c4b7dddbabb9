from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.voucher_entity import Voucher


class IVoucherQueryRepo(ABC):
    @abstractmethod
    async def get_by_code(self, *, code: str) -> Voucher | None:
        """Codes are matched case-insensitively (stored uppercase)"""
        pass

    @abstractmethod
    async def get_by_id(self, *, voucher_id: int) -> Voucher | None:
        pass
