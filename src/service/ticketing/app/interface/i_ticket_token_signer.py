from abc import ABC, abstractmethod

from src.service.ticketing.app.dto.ticket_dto import TicketTokenClaims


class ITicketTokenSigner(ABC):
    @abstractmethod
    def sign(self, *, claims: TicketTokenClaims) -> str:
        pass

    @abstractmethod
    def verify(self, *, token: str) -> TicketTokenClaims:
        """
        Raises:
            TokenExpiredError: signature fine but validity window passed
            InvalidTokenError: malformed, tampered or missing claims
        """
        pass
