"""
Handle Payment Webhook Use Case

Verifies the gateway signature over the raw body, parses the event and dispatches it
through a closed mapping of event name to transition.
"""

from typing import Any, Awaitable, Callable, Dict, Self

import orjson
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthenticationError, DomainError, UpstreamError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.payment_metrics import metrics
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.app.dto.webhook_dto import TransitionOutcome
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.enum.gateway_event import GatewayEvent


def _entity(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    return ((payload.get(key) or {}).get('entity')) or {}


class HandlePaymentWebhookUseCase:
    def __init__(
        self,
        *,
        payment_gateway: IPaymentGateway,
        settle_payment_use_case: SettlePaymentUseCase,
    ) -> None:
        self.payment_gateway = payment_gateway
        self.settle_payment_use_case = settle_payment_use_case
        self.tracer = trace.get_tracer(__name__)
        self._handlers: Dict[
            GatewayEvent, Callable[[Dict[str, Any]], Awaitable[TransitionOutcome]]
        ] = {
            GatewayEvent.PAYMENT_CAPTURED: self._on_payment_captured,
            GatewayEvent.ORDER_PAID: self._on_order_paid,
            GatewayEvent.PAYMENT_LINK_PAID: self._on_payment_link_paid,
            GatewayEvent.PAYMENT_FAILED: self._on_payment_failed,
            GatewayEvent.PAYMENT_LINK_CANCELLED: self._on_payment_link_cancelled,
            GatewayEvent.PAYMENT_LINK_EXPIRED: self._on_payment_link_expired,
            GatewayEvent.REFUND_CREATED: self._on_refund_created,
            GatewayEvent.REFUND_PROCESSED: self._on_refund_processed,
        }

    @classmethod
    @inject
    def depends(
        cls,
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settle_payment_use_case: SettlePaymentUseCase = Depends(SettlePaymentUseCase.depends),
    ) -> Self:
        return cls(payment_gateway=payment_gateway, settle_payment_use_case=settle_payment_use_case)

    @Logger.io
    async def execute(self, *, raw_body: bytes, signature: str | None) -> TransitionOutcome:
        if not self.payment_gateway.verify_webhook_signature(
            raw_body=raw_body, signature=signature
        ):
            Logger.base.warning('🚫 [WEBHOOK] Rejected request with invalid signature')
            metrics.record_webhook_event(event='unknown', result='unauthorized')
            raise AuthenticationError('Invalid webhook signature', code='INVALID_SIGNATURE')

        try:
            body = orjson.loads(raw_body)
        except orjson.JSONDecodeError as e:
            raise DomainError('Malformed webhook body') from e
        if not isinstance(body, dict):
            raise DomainError('Malformed webhook body')

        event_name = str(body.get('event', ''))
        payload = body.get('payload') or {}

        try:
            event = GatewayEvent(event_name)
        except ValueError:
            Logger.base.info(f'📭 [WEBHOOK] Unhandled event {event_name!r} acknowledged')
            metrics.record_webhook_event(event=event_name or 'unknown', result='ignored')
            return TransitionOutcome.IGNORED

        with self.tracer.start_as_current_span(
            'use_case.handle_payment_webhook', attributes={'webhook.event': event.value}
        ):
            try:
                outcome = await self._handlers[event](payload)
            except Exception:
                metrics.record_webhook_event(event=event.value, result='error')
                raise

        metrics.record_webhook_event(event=event.value, result=outcome.value)
        Logger.base.info(f'📬 [WEBHOOK] {event.value} -> {outcome.value}')
        return outcome

    # ========== SUCCESS ==========

    async def _on_payment_captured(self, payload: Dict[str, Any]) -> TransitionOutcome:
        payment = _entity(payload, 'payment')
        order_id = payment.get('order_id')
        if not order_id:
            return TransitionOutcome.IGNORED
        return await self.settle_payment_use_case.mark_succeeded(
            order_id=order_id, gateway_payment_id=payment.get('id')
        )

    async def _on_order_paid(self, payload: Dict[str, Any]) -> TransitionOutcome:
        order_id = _entity(payload, 'order').get('id')
        if not order_id:
            return TransitionOutcome.IGNORED
        return await self.settle_payment_use_case.mark_succeeded(
            order_id=order_id, gateway_payment_id=_entity(payload, 'payment').get('id')
        )

    async def _on_payment_link_paid(self, payload: Dict[str, Any]) -> TransitionOutcome:
        order_id = _entity(payload, 'payment_link').get('reference_id')
        if not order_id:
            return TransitionOutcome.IGNORED

        gateway_payment_id = _entity(payload, 'payment').get('id')
        if not gateway_payment_id:
            gateway_payment_id = await self._lookup_payment_id(order_id)
        return await self.settle_payment_use_case.mark_succeeded(
            order_id=order_id, gateway_payment_id=gateway_payment_id
        )

    async def _lookup_payment_id(self, order_id: str) -> str | None:
        try:
            payments = await self.payment_gateway.fetch_order_payments(order_id=order_id)
        except UpstreamError as e:
            Logger.base.warning(f'⚠️ [WEBHOOK] Could not fetch payments of {order_id}: {e}')
            return None
        captured = [p for p in payments if p.status == 'captured']
        chosen = captured or payments
        return chosen[0].id if chosen else None

    # ========== FAILED ==========

    async def _on_payment_failed(self, payload: Dict[str, Any]) -> TransitionOutcome:
        payment = _entity(payload, 'payment')
        order_id = payment.get('order_id')
        if not order_id:
            return TransitionOutcome.IGNORED
        reason = f'{payment.get("error_code")}: {payment.get("error_description")}'
        return await self.settle_payment_use_case.mark_failed(
            order_id=order_id, reason=reason, gateway_payment_id=payment.get('id')
        )

    async def _on_payment_link_cancelled(self, payload: Dict[str, Any]) -> TransitionOutcome:
        return await self._fail_payment_link(payload, reason='Payment link cancelled by user')

    async def _on_payment_link_expired(self, payload: Dict[str, Any]) -> TransitionOutcome:
        return await self._fail_payment_link(payload, reason='Payment link expired')

    async def _fail_payment_link(self, payload: Dict[str, Any], *, reason: str) -> TransitionOutcome:
        order_id = _entity(payload, 'payment_link').get('reference_id')
        if not order_id:
            return TransitionOutcome.IGNORED
        return await self.settle_payment_use_case.mark_failed(order_id=order_id, reason=reason)

    # ========== REFUND ==========

    @staticmethod
    def _refund_details(refund: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': refund.get('id'),
            'amount': refund.get('amount'),
            'status': refund.get('status'),
        }

    async def _on_refund_created(self, payload: Dict[str, Any]) -> TransitionOutcome:
        refund = _entity(payload, 'refund')
        if not refund.get('payment_id'):
            return TransitionOutcome.IGNORED
        return await self.settle_payment_use_case.record_refund_created(
            gateway_payment_id=refund['payment_id'], refund=self._refund_details(refund)
        )

    async def _on_refund_processed(self, payload: Dict[str, Any]) -> TransitionOutcome:
        refund = _entity(payload, 'refund')
        if not refund.get('payment_id'):
            return TransitionOutcome.IGNORED
        return await self.settle_payment_use_case.mark_refunded(
            gateway_payment_id=refund['payment_id'], refund=self._refund_details(refund)
        )
