"""
Notification Sender Implementation

Posts ticket, voucher and email messages to the messaging relay configured by
NOTIFICATION_API_URL. With no URL configured messages are only logged.
"""

import base64
from typing import Any

import httpx

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import UpstreamError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender


class NotificationSenderImpl(INotificationSender):
    def __init__(
        self,
        *,
        api_url: str | None = None,
        api_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = (api_url if api_url is not None else settings.NOTIFICATION_API_URL).rstrip('/')
        self._api_token = (
            api_token
            if api_token is not None
            else settings.NOTIFICATION_API_TOKEN.get_secret_value()
        )
        self._transport = transport

    async def _post(self, path: str, body: dict[str, Any]) -> None:
        if not self._api_url:
            Logger.base.info(f'📨 [NOTIFY] Relay not configured, skipped {path}')
            return

        headers = {'Authorization': f'Bearer {self._api_token}'} if self._api_token else {}
        try:
            async with httpx.AsyncClient(
                timeout=settings.GATEWAY_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                response = await client.post(f'{self._api_url}{path}', json=body, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f'Notification relay failed: {e}') from e

    @Logger.io
    async def send_ticket(
        self, *, phone: str, name: str, resource_name: str, qr_url: str, seat: str | None = None
    ) -> None:
        await self._post(
            '/messages/ticket',
            {
                'phone': phone,
                'name': name,
                'resource_name': resource_name,
                'qr_url': qr_url,
                'seat': seat,
            },
        )

    @Logger.io
    async def send_email(self, *, to: str, subject: str, body: str) -> None:
        await self._post('/messages/email', {'to': to, 'subject': subject, 'body': body})

    @Logger.io
    async def send_voucher(
        self, *, phone: str, name: str, voucher_title: str, redeem_url: str, qr_png: bytes
    ) -> None:
        await self._post(
            '/messages/voucher',
            {
                'phone': phone,
                'name': name,
                'voucher_title': voucher_title,
                'redeem_url': redeem_url,
                'qr_png_base64': base64.b64encode(qr_png).decode('ascii'),
            },
        )
