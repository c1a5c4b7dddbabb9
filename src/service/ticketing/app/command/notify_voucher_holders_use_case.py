from typing import Dict, Self
from urllib.parse import urlencode

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender
from src.service.ticketing.app.interface.i_qr_code_renderer import IQrCodeRenderer
from src.service.ticketing.app.interface.i_voucher_query_repo import IVoucherQueryRepo
from src.service.ticketing.domain.entity.payment_entity import Payment


def build_redeem_url(phone: str) -> str:
    query = urlencode({'phone': phone})
    return f'{settings.PUBLIC_BASE_URL.rstrip("/")}/api/vouchers/redeem?{query}'


class NotifyVoucherHoldersUseCase:
    """
    Send each phone that claimed the order's voucher a QR of its redeem link.

    The venue scans that QR to redeem the voucher. Best-effort: each delivery
    failure is logged and the rest continue.
    """

    def __init__(
        self,
        *,
        notification_sender: INotificationSender,
        qr_code_renderer: IQrCodeRenderer,
        voucher_query_repo: IVoucherQueryRepo,
    ) -> None:
        self.notification_sender = notification_sender
        self.qr_code_renderer = qr_code_renderer
        self.voucher_query_repo = voucher_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        notification_sender: INotificationSender = Depends(
            Provide[Container.notification_sender]
        ),
        qr_code_renderer: IQrCodeRenderer = Depends(Provide[Container.qr_code_renderer]),
        voucher_query_repo: IVoucherQueryRepo = Depends(Provide[Container.voucher_query_repo]),
    ) -> Self:
        return cls(
            notification_sender=notification_sender,
            qr_code_renderer=qr_code_renderer,
            voucher_query_repo=voucher_query_repo,
        )

    @Logger.io
    async def execute(self, *, payment: Payment) -> int:
        """Returns how many voucher messages were handed to the sender"""
        if not payment.voucher_claim:
            return 0
        voucher_id, phones = payment.voucher_claim

        voucher = await self.voucher_query_repo.get_by_id(voucher_id=voucher_id)
        if not voucher:
            Logger.base.warning(f'🎟️ [VOUCHER-QR] Voucher {voucher_id} not found, nothing sent')
            return 0

        names: Dict[str, str] = {
            normalize_phone(party.phone): party.name for party in payment.metadata.parties
        }

        sent = 0
        for phone in phones:
            redeem_url = build_redeem_url(phone)
            try:
                await self.notification_sender.send_voucher(
                    phone=phone,
                    name=names.get(normalize_phone(phone), ''),
                    voucher_title=voucher.title or voucher.code,
                    redeem_url=redeem_url,
                    qr_png=self.qr_code_renderer.render_png(data=redeem_url),
                )
                sent += 1
            except Exception as e:
                Logger.base.error(f'🎟️ [VOUCHER-QR] Voucher message to {phone} failed: {e}')

        Logger.base.info(
            f'🎟️ [VOUCHER-QR] {sent}/{len(phones)} voucher message(s) sent '
            f'for order {payment.order_id}'
        )
        return sent
