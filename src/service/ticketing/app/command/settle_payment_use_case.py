"""
Settle Payment Use Case

The payment state machine's side effects. Each transition is won through a guarded
status UPDATE first; only the winner runs the follow-up steps. Once the new status is
durable, follow-up failures are logged and never undo or fail the transition.

    PENDING -> SUCCESS : enrollment, voucher confirm, seat confirm, ticket and voucher QRs
    PENDING -> FAILED  : voucher release, seat release
    SUCCESS -> REFUNDED: tickets refunded, capacity restored, voucher release
"""

from typing import Any, Awaitable, Callable, Self

import attrs
from anyio.abc import TaskGroup
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.create_enrollment_use_case import CreateEnrollmentUseCase
from src.service.ticketing.app.command.notify_ticket_holders_use_case import (
    NotifyTicketHoldersUseCase,
)
from src.service.ticketing.app.command.notify_voucher_holders_use_case import (
    NotifyVoucherHoldersUseCase,
)
from src.service.ticketing.app.command.reverse_enrollment_use_case import (
    ReverseEnrollmentUseCase,
)
from src.service.ticketing.app.dto.webhook_dto import TransitionOutcome
from src.service.ticketing.app.interface.i_payment_command_repo import IPaymentCommandRepo
from src.service.ticketing.app.interface.i_payment_query_repo import IPaymentQueryRepo
from src.service.ticketing.app.interface.i_seat_reservation_handler import (
    ISeatReservationHandler,
)
from src.service.ticketing.app.interface.i_voucher_command_repo import IVoucherCommandRepo
from src.service.ticketing.domain.entity.enrollment_entity import EventEnrollment
from src.service.ticketing.domain.entity.payment_entity import Payment, PaymentStatus


class SettlePaymentUseCase:
    def __init__(
        self,
        *,
        payment_query_repo: IPaymentQueryRepo,
        payment_command_repo: IPaymentCommandRepo,
        voucher_command_repo: IVoucherCommandRepo,
        seat_reservation_handler: ISeatReservationHandler,
        create_enrollment_use_case: CreateEnrollmentUseCase,
        reverse_enrollment_use_case: ReverseEnrollmentUseCase,
        notify_ticket_holders_use_case: NotifyTicketHoldersUseCase,
        notify_voucher_holders_use_case: NotifyVoucherHoldersUseCase,
        task_group: TaskGroup | None = None,
    ) -> None:
        self.payment_query_repo = payment_query_repo
        self.payment_command_repo = payment_command_repo
        self.voucher_command_repo = voucher_command_repo
        self.seat_reservation_handler = seat_reservation_handler
        self.create_enrollment_use_case = create_enrollment_use_case
        self.reverse_enrollment_use_case = reverse_enrollment_use_case
        self.notify_ticket_holders_use_case = notify_ticket_holders_use_case
        self.notify_voucher_holders_use_case = notify_voucher_holders_use_case
        self.task_group = task_group
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        payment_query_repo: IPaymentQueryRepo = Depends(Provide[Container.payment_query_repo]),
        payment_command_repo: IPaymentCommandRepo = Depends(
            Provide[Container.payment_command_repo]
        ),
        voucher_command_repo: IVoucherCommandRepo = Depends(
            Provide[Container.voucher_command_repo]
        ),
        seat_reservation_handler: ISeatReservationHandler = Depends(
            Provide[Container.seat_reservation_handler]
        ),
        create_enrollment_use_case: CreateEnrollmentUseCase = Depends(
            CreateEnrollmentUseCase.depends
        ),
        reverse_enrollment_use_case: ReverseEnrollmentUseCase = Depends(
            ReverseEnrollmentUseCase.depends
        ),
        notify_ticket_holders_use_case: NotifyTicketHoldersUseCase = Depends(
            NotifyTicketHoldersUseCase.depends
        ),
        notify_voucher_holders_use_case: NotifyVoucherHoldersUseCase = Depends(
            NotifyVoucherHoldersUseCase.depends
        ),
        task_group: TaskGroup | None = Depends(Provide[Container.task_group]),
    ) -> Self:
        return cls(
            payment_query_repo=payment_query_repo,
            payment_command_repo=payment_command_repo,
            voucher_command_repo=voucher_command_repo,
            seat_reservation_handler=seat_reservation_handler,
            create_enrollment_use_case=create_enrollment_use_case,
            reverse_enrollment_use_case=reverse_enrollment_use_case,
            notify_ticket_holders_use_case=notify_ticket_holders_use_case,
            notify_voucher_holders_use_case=notify_voucher_holders_use_case,
            task_group=task_group,
        )

    # ========== Transitions ==========

    @Logger.io
    async def mark_succeeded(
        self, *, order_id: str, gateway_payment_id: str | None
    ) -> TransitionOutcome:
        with self.tracer.start_as_current_span(
            'use_case.settle_payment.success', attributes={'order.id': order_id}
        ):
            payment = await self.payment_query_repo.get_by_order_id(order_id=order_id)
            if not payment:
                Logger.base.warning(f'⚠️ [SETTLE] Unknown order {order_id}, success ignored')
                return TransitionOutcome.IGNORED
            if payment.status == PaymentStatus.SUCCESS and gateway_payment_id:
                await self._backfill_gateway_payment_id(payment, gateway_payment_id)
            if not payment.can_transition_to(PaymentStatus.SUCCESS):
                Logger.base.info(
                    f'🔁 [SETTLE] Order {order_id} is {payment.status}, success is a no-op'
                )
                return TransitionOutcome.NOOP

            succeeded = payment.mark_succeeded(gateway_payment_id=gateway_payment_id)
            if not await self.payment_command_repo.transition_status(
                payment=succeeded, expected=PaymentStatus.PENDING
            ):
                return TransitionOutcome.NOOP

            enrollment = await self._step(
                'create enrollment',
                order_id,
                self._create_enrollment,
                succeeded,
            )
            if succeeded.voucher_claim:
                voucher_id, phones = succeeded.voucher_claim
                await self._step(
                    'confirm voucher',
                    order_id,
                    self.voucher_command_repo.confirm,
                    voucher_id=voucher_id,
                    count=len(phones),
                )
            if succeeded.metadata.selected_seats:
                await self._step(
                    'confirm seats',
                    order_id,
                    self.seat_reservation_handler.confirm,
                    order_id=order_id,
                )
            await self._dispatch_notifications(enrollment=enrollment, payment=succeeded)

            return TransitionOutcome.APPLIED

    @Logger.io
    async def mark_failed(
        self, *, order_id: str, reason: str, gateway_payment_id: str | None = None
    ) -> TransitionOutcome:
        with self.tracer.start_as_current_span(
            'use_case.settle_payment.failed', attributes={'order.id': order_id}
        ):
            payment = await self.payment_query_repo.get_by_order_id(order_id=order_id)
            if not payment:
                Logger.base.warning(f'⚠️ [SETTLE] Unknown order {order_id}, failure ignored')
                return TransitionOutcome.IGNORED
            if not payment.can_transition_to(PaymentStatus.FAILED):
                Logger.base.info(
                    f'🔁 [SETTLE] Order {order_id} is {payment.status}, failure is a no-op'
                )
                return TransitionOutcome.NOOP

            failed = payment.mark_failed(reason=reason, gateway_payment_id=gateway_payment_id)
            if not await self.payment_command_repo.transition_status(
                payment=failed, expected=PaymentStatus.PENDING
            ):
                return TransitionOutcome.NOOP

            await self._release_voucher(failed)
            if failed.metadata.selected_seats:
                await self._step(
                    'release seats',
                    order_id,
                    self.seat_reservation_handler.release,
                    order_id=order_id,
                )

            return TransitionOutcome.APPLIED

    @Logger.io
    async def mark_refunded(
        self, *, gateway_payment_id: str, refund: dict[str, Any]
    ) -> TransitionOutcome:
        with self.tracer.start_as_current_span(
            'use_case.settle_payment.refunded',
            attributes={'payment.gateway_id': gateway_payment_id},
        ):
            payment = await self.payment_query_repo.get_by_gateway_payment_id(
                gateway_payment_id=gateway_payment_id
            )
            if not payment:
                Logger.base.warning(
                    f'⚠️ [SETTLE] Unknown payment {gateway_payment_id}, refund ignored'
                )
                return TransitionOutcome.IGNORED
            if not payment.can_transition_to(PaymentStatus.REFUNDED):
                Logger.base.info(
                    f'🔁 [SETTLE] Order {payment.order_id} is {payment.status}, '
                    'refund is a no-op'
                )
                return TransitionOutcome.NOOP

            refunded = payment.mark_refunded()
            if not await self.payment_command_repo.transition_status(
                payment=refunded, expected=PaymentStatus.SUCCESS
            ):
                return TransitionOutcome.NOOP

            order_id = refunded.order_id
            await self._step(
                'record refund',
                order_id,
                self.payment_command_repo.record_refund,
                order_id=order_id,
                refund=refund,
            )
            await self._step(
                'reverse enrollment',
                order_id,
                self.reverse_enrollment_use_case.execute,
                order_id=order_id,
            )
            # usage_count stays: it counts paid claims ever made
            await self._release_voucher(refunded)

            return TransitionOutcome.APPLIED

    @Logger.io
    async def record_refund_created(
        self, *, gateway_payment_id: str, refund: dict[str, Any]
    ) -> TransitionOutcome:
        payment = await self.payment_query_repo.get_by_gateway_payment_id(
            gateway_payment_id=gateway_payment_id
        )
        if not payment:
            Logger.base.warning(
                f'⚠️ [SETTLE] Unknown payment {gateway_payment_id}, refund note ignored'
            )
            return TransitionOutcome.IGNORED

        await self.payment_command_repo.record_refund(order_id=payment.order_id, refund=refund)
        Logger.base.info(f'📝 [SETTLE] Refund {refund.get("id")} noted on {payment.order_id}')
        return TransitionOutcome.APPLIED

    # ========== Follow-up steps ==========

    async def _backfill_gateway_payment_id(self, payment: Payment, gateway_payment_id: str) -> None:
        """A status poll can settle before the webhook brings the payment id"""
        if payment.gateway_payment_id:
            return
        await self.payment_command_repo.transition_status(
            payment=attrs.evolve(payment, gateway_payment_id=gateway_payment_id),
            expected=PaymentStatus.SUCCESS,
        )

    async def _create_enrollment(self, payment: Payment) -> EventEnrollment:
        enrollment, _ = await self.create_enrollment_use_case.execute(payment=payment)
        return enrollment

    async def _release_voucher(self, payment: Payment) -> None:
        if not payment.voucher_claim:
            return
        voucher_id, phones = payment.voucher_claim
        await self._step(
            'release voucher',
            payment.order_id,
            self.voucher_command_repo.release,
            voucher_id=voucher_id,
            phones=phones,
        )

    @staticmethod
    async def _step(
        step_name: str,
        step_order_id: str,
        func: Callable[..., Awaitable[Any]],
        /,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Run a post-transition step; a failure is logged and reported as None"""
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            Logger.base.exception(
                f'❌ [SETTLE] {step_name} failed for order {step_order_id}: {e}'
            )
            return None

    async def _dispatch_notifications(
        self, *, enrollment: EventEnrollment | None, payment: Payment
    ) -> None:
        if enrollment is None and not payment.voucher_claim:
            return
        if self.task_group is not None:
            self.task_group.start_soon(self._notify, enrollment, payment)
        else:
            await self._notify(enrollment, payment)

    async def _notify(self, enrollment: EventEnrollment | None, payment: Payment) -> None:
        # Tickets need the enrollment; voucher QRs only need the claim
        if enrollment is not None:
            await self._step(
                'notify ticket holders',
                payment.order_id,
                self.notify_ticket_holders_use_case.execute,
                enrollment=enrollment,
                payment=payment,
            )
        if payment.voucher_claim:
            await self._step(
                'notify voucher holders',
                payment.order_id,
                self.notify_voucher_holders_use_case.execute,
                payment=payment,
            )
