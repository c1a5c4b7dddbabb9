from abc import ABC, abstractmethod


class INotificationSender(ABC):
    """Fire-and-forget delivery; callers log failures and move on"""

    @abstractmethod
    async def send_ticket(
        self, *, phone: str, name: str, resource_name: str, qr_url: str, seat: str | None = None
    ) -> None:
        pass

    @abstractmethod
    async def send_email(self, *, to: str, subject: str, body: str) -> None:
        pass

    @abstractmethod
    async def send_voucher(
        self, *, phone: str, name: str, voucher_title: str, redeem_url: str, qr_png: bytes
    ) -> None:
        pass
