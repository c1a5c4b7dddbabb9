from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.payment_entity import Payment


class IPaymentQueryRepo(ABC):
    @abstractmethod
    async def get_by_order_id(self, *, order_id: str) -> Payment | None:
        pass

    @abstractmethod
    async def get_by_gateway_payment_id(self, *, gateway_payment_id: str) -> Payment | None:
        pass
