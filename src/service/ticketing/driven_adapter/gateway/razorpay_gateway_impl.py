"""
Razorpay Gateway Implementation

Thin httpx client over the Orders, Payments and Payment Links REST API. Amounts leave
this module in paise. Every transport error or non-2xx answer becomes UpstreamError.
"""

from decimal import Decimal
from typing import Any, List

import httpx

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import UpstreamError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.gateway_dto import (
    GatewayOrder,
    GatewayPayment,
    GatewayPaymentLink,
    PaymentLinkRequest,
    to_minor_units,
)
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.driven_adapter.gateway.webhook_signature import is_valid_signature


class RazorpayGatewayImpl(IPaymentGateway):
    def __init__(
        self,
        *,
        key_id: str | None = None,
        key_secret: str | None = None,
        webhook_secret: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self._key_secret = (
            key_secret
            if key_secret is not None
            else settings.RAZORPAY_KEY_SECRET.get_secret_value()
        )
        self._webhook_secret = (
            webhook_secret
            if webhook_secret is not None
            else settings.RAZORPAY_WEBHOOK_SECRET.get_secret_value()
        )
        self._base_url = base_url or settings.RAZORPAY_BASE_URL
        self._timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def name(self) -> str:
        return 'razorpay'

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            auth=(self._key_id, self._key_secret),
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(f'Payment gateway unreachable: {e}') from e

        if response.is_error:
            try:
                description = response.json().get('error', {}).get('description')
            except ValueError:
                description = None
            raise UpstreamError(
                f'Payment gateway error ({response.status_code}): {description or response.text}'
            )
        return response.json()

    @staticmethod
    def _to_order(data: dict[str, Any]) -> GatewayOrder:
        return GatewayOrder(
            id=data['id'],
            amount_minor=int(data.get('amount', 0)),
            currency=data.get('currency', settings.CURRENCY),
            status=data.get('status', 'created'),
            receipt=data.get('receipt'),
            notes=data.get('notes') or {},
        )

    @Logger.io
    async def create_order(
        self, *, amount: Decimal, currency: str, receipt: str, notes: dict[str, Any]
    ) -> GatewayOrder:
        data = await self._request(
            'POST',
            '/orders',
            json={
                'amount': to_minor_units(amount),
                'currency': currency,
                'receipt': receipt,
                'notes': notes,
            },
        )
        return self._to_order(data)

    @Logger.io
    async def fetch_order(self, *, order_id: str) -> GatewayOrder:
        return self._to_order(await self._request('GET', f'/orders/{order_id}'))

    @Logger.io
    async def fetch_order_payments(self, *, order_id: str) -> List[GatewayPayment]:
        data = await self._request('GET', f'/orders/{order_id}/payments')
        return [
            GatewayPayment(
                id=item['id'],
                order_id=item.get('order_id', order_id),
                status=item.get('status', ''),
                amount_minor=int(item.get('amount', 0)),
            )
            for item in data.get('items', [])
        ]

    @Logger.io
    async def create_payment_link(self, *, request: PaymentLinkRequest) -> GatewayPaymentLink:
        customer: dict[str, Any] = {
            'name': request.customer_name,
            'contact': request.customer_phone,
        }
        if request.customer_email:
            customer['email'] = request.customer_email

        body: dict[str, Any] = {
            'amount': to_minor_units(request.amount),
            'currency': request.currency,
            'description': request.description,
            'reference_id': request.order_id,
            'customer': customer,
            'notify': {'sms': False, 'email': False},
            'notes': request.notes,
        }
        if request.callback_url:
            body |= {'callback_url': request.callback_url, 'callback_method': 'get'}

        data = await self._request('POST', '/payment_links', json=body)
        return GatewayPaymentLink(
            id=data['id'], short_url=data['short_url'], status=data.get('status', 'created')
        )

    def verify_webhook_signature(self, *, raw_body: bytes, signature: str | None) -> bool:
        return is_valid_signature(
            raw_body=raw_body, signature=signature, secret=self._webhook_secret
        )
