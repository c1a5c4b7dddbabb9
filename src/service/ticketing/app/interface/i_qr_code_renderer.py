from abc import ABC, abstractmethod


class IQrCodeRenderer(ABC):
    @abstractmethod
    def render_png(self, *, data: str) -> bytes:
        pass
