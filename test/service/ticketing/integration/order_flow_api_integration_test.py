"""
API integration tests: order -> webhook -> enrollment over HTTP

Runs the FastAPI app with the mock gateway on SQLite. Webhooks are signed with the
test secret exactly as the gateway would sign them.
"""

from decimal import Decimal
from typing import Any

from fastapi.testclient import TestClient
import orjson
import pytest
from sqlalchemy import select

from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.service.reservation.driven_adapter.model.seat_model import SeatModel
from src.service.ticketing.driven_adapter.gateway.webhook_signature import compute_signature
from src.service.ticketing.driven_adapter.model.enrollment_model import EventEnrollmentModel
from src.service.ticketing.driven_adapter.model.resource_model import ResourceModel
from src.service.ticketing.driven_adapter.model.voucher_model import VoucherModel


RESOURCE_ID = 1
SEATED_RESOURCE_ID = 2
BUYER = {'name': 'Asha', 'phone': '9876543210', 'email': 'asha@mailbox.org'}
ATTENDEE = {'name': 'Ravi', 'phone': '9123456789'}


async def _seed() -> None:
    async with container.database().session() as session:
        session.add(
            ResourceModel(
                id=RESOURCE_ID,
                name='Open Air Night',
                is_live=True,
                price=Decimal('500'),
                available_seats=10,
            )
        )
        session.add(
            ResourceModel(
                id=SEATED_RESOURCE_ID,
                name='Chamber Recital',
                is_live=True,
                price=Decimal('800'),
                has_seat_arrangement=True,
                available_seats=4,
            )
        )
        session.add_all(
            [
                SeatModel(resource_id=SEATED_RESOURCE_ID, seat_label=label, status='available')
                for label in ('A1', 'A2', 'A3', 'A4')
            ]
        )
        session.add(VoucherModel(code='FREEDRINK', title='Free drink', max_usage=1))
        await session.commit()


async def _resource_counters(resource_id: int = RESOURCE_ID) -> tuple[int, int]:
    async with container.database().session() as session:
        resource_model = await session.get(ResourceModel, resource_id)
        assert resource_model is not None
        return resource_model.available_seats, resource_model.tickets_sold


async def _enrollment_ticket_phones(order_id: str) -> list[str]:
    async with container.database().session() as session:
        result = await session.execute(
            select(EventEnrollmentModel).where(EventEnrollmentModel.order_id == order_id)
        )
        enrollment_model = result.scalar_one()
        return [ticket.phone for ticket in enrollment_model.tickets]


async def _enrollment_ticket_states(order_id: str) -> list[tuple[str, str | None]]:
    async with container.database().session() as session:
        result = await session.execute(
            select(EventEnrollmentModel).where(EventEnrollmentModel.order_id == order_id)
        )
        enrollment_model = result.scalar_one()
        return [
            (ticket.status, ticket.cancellation_reason) for ticket in enrollment_model.tickets
        ]


async def _seat_states(resource_id: int) -> dict[str, tuple[str, str | None]]:
    async with container.database().session() as session:
        result = await session.execute(
            select(SeatModel).where(SeatModel.resource_id == resource_id)
        )
        return {seat.seat_label: (seat.status, seat.order_id) for seat in result.scalars()}


def _post_webhook(client: TestClient, body: dict[str, Any], *, secret: str | None = None):
    raw_body = orjson.dumps(body)
    signature = compute_signature(
        raw_body=raw_body,
        secret=secret or settings.RAZORPAY_WEBHOOK_SECRET.get_secret_value(),
    )
    return client.post(
        '/api/webhooks/payment',
        content=raw_body,
        headers={'x-razorpay-signature': signature, 'content-type': 'application/json'},
    )


def _captured(order_id: str, payment_id: str) -> dict[str, Any]:
    return {
        'event': 'payment.captured',
        'payload': {'payment': {'entity': {'id': payment_id, 'order_id': order_id}}},
    }


def _refund_processed(payment_id: str, amount_paise: int) -> dict[str, Any]:
    return {
        'event': 'refund.processed',
        'payload': {
            'refund': {
                'entity': {
                    'id': f'rfnd_{payment_id}',
                    'payment_id': payment_id,
                    'amount': amount_paise,
                    'status': 'processed',
                }
            }
        },
    }


@pytest.fixture
def seeded_client(client: TestClient) -> TestClient:
    client.portal.call(_seed)
    return client


@pytest.mark.integration
class TestPlatformEndpoints:
    def test_health(self, client: TestClient) -> None:
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_webhook_with_bad_signature__401(self, client: TestClient) -> None:
        response = _post_webhook(client, _captured('order_x', 'pay_x'), secret='not_the_secret')

        assert response.status_code == 401
        assert response.json()['code'] == 'INVALID_SIGNATURE'

    def test_webhook_without_signature__401(self, client: TestClient) -> None:
        response = client.post('/api/webhooks/payment', content=b'{}')

        assert response.status_code == 401

    def test_webhook_for_unknown_order__acknowledged(self, client: TestClient) -> None:
        response = _post_webhook(client, _captured('order_unknown', 'pay_1'))

        assert response.status_code == 200
        assert response.json() == {'status': 'ok'}

    def test_ticket_verify_requires_staff_token(self, client: TestClient) -> None:
        response = client.get('/api/tickets/verify', params={'token': 'abc'})

        assert response.status_code == 401
        assert response.json()['code'] == 'NOT_AUTHENTICATED'


@pytest.mark.integration
class TestOrderToEnrollmentFlow:
    def _create_order(self, client: TestClient, **extra: Any) -> dict[str, Any]:
        response = client.post(
            '/api/orders',
            json={'buyer': BUYER, 'attendees': [ATTENDEE], 'resource_id': RESOURCE_ID, **extra},
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_order_paid_by_webhook_creates_enrollment_once(
        self, seeded_client: TestClient
    ) -> None:
        # Given
        order = self._create_order(seeded_client)
        order_id = order['order_id']
        assert Decimal(str(order['amount'])) == Decimal('1000')
        assert order['total_tickets'] == 2
        assert order['payment_url'] == f'http://testserver/mock-payment/{order_id}'

        pending = seeded_client.get(f'/api/orders/{order_id}/status')
        assert pending.json()['status'] == 'pending'

        # When - the gateway delivers the same success event twice
        first = _post_webhook(seeded_client, _captured(order_id, 'pay_e2e_1'))
        replay = _post_webhook(seeded_client, _captured(order_id, 'pay_e2e_1'))

        # Then
        assert first.status_code == 200
        assert replay.status_code == 200
        status = seeded_client.get(f'/api/orders/{order_id}/status').json()
        assert status['status'] == 'success'
        assert status['gateway_payment_id'] == 'pay_e2e_1'
        assert seeded_client.portal.call(_resource_counters) == (8, 2)
        assert sorted(seeded_client.portal.call(_enrollment_ticket_phones, order_id)) == [
            '9123456789',
            '9876543210',
        ]

    def test_failure_after_success_is_ignored(self, seeded_client: TestClient) -> None:
        order_id = self._create_order(seeded_client)['order_id']
        _post_webhook(seeded_client, _captured(order_id, 'pay_e2e_2'))

        late_failure = _post_webhook(
            seeded_client,
            {
                'event': 'payment.failed',
                'payload': {
                    'payment': {
                        'entity': {
                            'id': 'pay_e2e_3',
                            'order_id': order_id,
                            'error_description': 'Card declined',
                        }
                    }
                },
            },
        )

        assert late_failure.status_code == 200
        status = seeded_client.get(f'/api/orders/{order_id}/status').json()
        assert status['status'] == 'success'

    def test_mock_checkout_settles_order(self, seeded_client: TestClient) -> None:
        order_id = self._create_order(seeded_client)['order_id']

        response = seeded_client.get(f'/mock-payment/{order_id}')

        assert response.status_code == 200
        assert response.json() == {'order_id': order_id, 'result': 'applied'}
        status = seeded_client.get(f'/api/orders/{order_id}/status').json()
        assert status['status'] == 'success'

    def test_second_order_for_same_phone_rejected(self, seeded_client: TestClient) -> None:
        order_id = self._create_order(seeded_client)['order_id']
        _post_webhook(seeded_client, _captured(order_id, 'pay_e2e_4'))

        response = seeded_client.post(
            '/api/orders', json={'buyer': BUYER, 'resource_id': RESOURCE_ID}
        )

        assert response.status_code == 400

    def test_voucher_pool_exhausted__409(self, seeded_client: TestClient) -> None:
        response = seeded_client.post(
            '/api/vouchers/check-availability',
            json={'code': 'freedrink', 'phones': ['9876543210', '9123456789']},
        )

        assert response.status_code == 409
        body = response.json()
        assert body['code'] == 'VOUCHER_EXHAUSTED'
        assert body['available_slots'] == 1
        assert body['required_slots'] == 2

    def test_refund_after_success_reverses_every_ticket(self, seeded_client: TestClient) -> None:
        # Given - a paid order for three tickets
        order = self._create_order(
            seeded_client,
            attendees=[ATTENDEE, {'name': 'Meera', 'phone': '9000000003'}],
        )
        order_id = order['order_id']
        assert order['total_tickets'] == 3
        _post_webhook(seeded_client, _captured(order_id, 'pay_refund_1'))
        assert seeded_client.portal.call(_resource_counters) == (7, 3)

        # When
        response = _post_webhook(seeded_client, _refund_processed('pay_refund_1', 150000))
        replay = _post_webhook(seeded_client, _refund_processed('pay_refund_1', 150000))

        # Then
        assert response.status_code == 200
        assert replay.status_code == 200
        assert seeded_client.get(f'/api/orders/{order_id}/status').json()['status'] == 'refunded'
        assert seeded_client.portal.call(_enrollment_ticket_states, order_id) == [
            ('refunded', 'Payment refunded')
        ] * 3
        assert seeded_client.portal.call(_resource_counters) == (10, 0)

    def test_seat_order_paid__seats_booked(self, seeded_client: TestClient) -> None:
        # Given
        order = self._create_order(
            seeded_client,
            resource_id=SEATED_RESOURCE_ID,
            selected_seats=[
                {'seat_label': 'a1', 'phone': BUYER['phone']},
                {'seat_label': 'A2', 'phone': ATTENDEE['phone']},
            ],
        )
        order_id = order['order_id']
        held = seeded_client.portal.call(_seat_states, SEATED_RESOURCE_ID)
        assert held['A1'] == ('reserved', order_id)
        assert held['A2'] == ('reserved', order_id)

        # When
        response = _post_webhook(seeded_client, _captured(order_id, 'pay_seat_1'))

        # Then
        assert response.status_code == 200
        seats = seeded_client.portal.call(_seat_states, SEATED_RESOURCE_ID)
        assert seats['A1'] == ('booked', order_id)
        assert seats['A2'] == ('booked', order_id)
        assert seats['A3'] == ('available', None)
        assert seeded_client.portal.call(_resource_counters, SEATED_RESOURCE_ID) == (2, 2)

    def test_seat_order_failed__seats_released(self, seeded_client: TestClient) -> None:
        order_id = self._create_order(
            seeded_client,
            resource_id=SEATED_RESOURCE_ID,
            selected_seats=[
                {'seat_label': 'A3', 'phone': BUYER['phone']},
                {'seat_label': 'A4', 'phone': ATTENDEE['phone']},
            ],
        )['order_id']

        response = _post_webhook(
            seeded_client,
            {
                'event': 'payment_link.expired',
                'payload': {'payment_link': {'entity': {'reference_id': order_id}}},
            },
        )

        assert response.status_code == 200
        assert seeded_client.get(f'/api/orders/{order_id}/status').json()['status'] == 'failed'
        seats = seeded_client.portal.call(_seat_states, SEATED_RESOURCE_ID)
        assert seats['A3'] == ('available', None)
        assert seats['A4'] == ('available', None)
