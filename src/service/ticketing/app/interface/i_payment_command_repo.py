"""
Payment Command Repository Interface

Every status change goes through transition_status, a conditional update keyed on
the expected current status. Callers never read-then-write the status column.
"""

from abc import ABC, abstractmethod
from typing import Any

from src.service.ticketing.domain.entity.payment_entity import Payment, PaymentStatus


class IPaymentCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def delete(self, *, order_id: str) -> bool:
        """
        Remove a PENDING payment (order-creation compensation)

        Returns:
            True if a row was deleted
        """
        pass

    @abstractmethod
    async def transition_status(self, *, payment: Payment, expected: PaymentStatus) -> bool:
        """
        Persist ``payment`` only if the stored status still equals ``expected``

        Args:
            payment: Entity already carrying the new status and fields
            expected: Status the row must currently have

        Returns:
            True if this call won the transition, False if another caller already moved it
        """
        pass

    @abstractmethod
    async def set_payment_link(self, *, order_id: str, link_id: str, url: str) -> None:
        pass

    @abstractmethod
    async def set_buyer_user(self, *, order_id: str, buyer_user_id: int) -> None:
        pass

    @abstractmethod
    async def record_refund(self, *, order_id: str, refund: dict[str, Any]) -> None:
        """Attach refund details to the metadata snapshot without changing status"""
        pass
