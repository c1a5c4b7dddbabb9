"""
Unit tests for RazorpayGatewayImpl over httpx.MockTransport
"""

from decimal import Decimal

import httpx
import orjson
import pytest

from src.platform.exception.exceptions import UpstreamError
from src.service.ticketing.app.dto.gateway_dto import PaymentLinkRequest
from src.service.ticketing.driven_adapter.gateway.razorpay_gateway_impl import (
    RazorpayGatewayImpl,
)


def _gateway(handler) -> RazorpayGatewayImpl:
    return RazorpayGatewayImpl(
        key_id='rzp_test_key',
        key_secret='rzp_test_secret',
        webhook_secret='whsec',
        base_url='https://api.razorpay.test/v1',
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestRazorpayGateway:
    @pytest.mark.asyncio
    async def test_create_order__amount_in_paise(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['path'] = request.url.path
            seen['body'] = orjson.loads(request.content)
            seen['auth'] = request.headers.get('authorization', '')
            return httpx.Response(
                200,
                json={
                    'id': 'order_rzp_1',
                    'amount': 149950,
                    'currency': 'INR',
                    'status': 'created',
                    'receipt': 'order_1',
                },
            )

        order = await _gateway(handler).create_order(
            amount=Decimal('1499.50'), currency='INR', receipt='order_1', notes={'a': 'b'}
        )

        assert seen['path'] == '/v1/orders'
        assert seen['body']['amount'] == 149950
        assert seen['auth'].startswith('Basic ')
        assert order.id == 'order_rzp_1'
        assert not order.is_paid

    @pytest.mark.asyncio
    async def test_payment_link_carries_order_reference(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['body'] = orjson.loads(request.content)
            return httpx.Response(
                200, json={'id': 'plink_1', 'short_url': 'https://rzp.io/i/abc'}
            )

        link = await _gateway(handler).create_payment_link(
            request=PaymentLinkRequest(
                order_id='order_rzp_1',
                amount=Decimal('500'),
                currency='INR',
                description='Payment for Open Air Night (1 ticket)',
                customer_name='Asha',
                customer_phone='9876543210',
                callback_url='https://shop.test/callback',
            )
        )

        assert seen['body']['reference_id'] == 'order_rzp_1'
        assert seen['body']['amount'] == 50000
        assert seen['body']['callback_method'] == 'get'
        assert 'email' not in seen['body']['customer']
        assert link.short_url == 'https://rzp.io/i/abc'

    @pytest.mark.asyncio
    async def test_fetch_order_payments(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    'items': [
                        {'id': 'pay_1', 'order_id': 'order_rzp_1', 'status': 'captured'},
                    ]
                },
            )

        payments = await _gateway(handler).fetch_order_payments(order_id='order_rzp_1')

        assert [p.id for p in payments] == ['pay_1']
        assert payments[0].status == 'captured'

    @pytest.mark.asyncio
    async def test_error_response__upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400, json={'error': {'description': 'The amount must be at least INR 1.00'}}
            )

        with pytest.raises(UpstreamError, match='at least INR 1.00'):
            await _gateway(handler).fetch_order(order_id='order_rzp_1')

    @pytest.mark.asyncio
    async def test_transport_error__upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        with pytest.raises(UpstreamError, match='unreachable'):
            await _gateway(handler).fetch_order(order_id='order_rzp_1')
