import time
from typing import Any, List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    CustomBaseError,
    DomainError,
    NotFoundError,
    SeatUnavailableError,
    UpstreamError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.payment_metrics import metrics
from src.service.shared_kernel.domain.value_object.phone import (
    normalize_phone,
    validate_email_address,
    validate_phone,
)
from src.service.ticketing.app.dto.gateway_dto import PaymentLinkRequest
from src.service.ticketing.app.dto.order_dto import CreateOrderCommand, CreateOrderResult
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.app.interface.i_payment_command_repo import IPaymentCommandRepo
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.app.interface.i_seat_reservation_handler import (
    ISeatReservationHandler,
)
from src.service.ticketing.app.interface.i_voucher_command_repo import IVoucherCommandRepo
from src.service.ticketing.app.interface.i_voucher_query_repo import IVoucherQueryRepo
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.resource_entity import Resource
from src.service.ticketing.domain.entity.voucher_entity import Voucher
from src.service.ticketing.domain.value_object.order_metadata import (
    OrderMetadata,
    Party,
    SelectedSeat,
)


class CreateOrderUseCase:
    """
    Create a payment order and hold everything it needs.

    Flow:
    1. Validate resource, buyer, attendees, duplicates and existing tickets
    2. Resolve price and check seat selection
    3. Claim voucher slots (best-effort, partial)
    4. Open gateway order -> persist PENDING payment -> reserve seats
    5. Open hosted payment link

    Compensation (seat reservation failed):
    - delete the PENDING payment
    - release the voucher phones claimed by this request
    The original seat error is what the caller sees.
    """

    def __init__(
        self,
        *,
        resource_repo: IResourceRepo,
        enrollment_query_repo: IEnrollmentQueryRepo,
        voucher_query_repo: IVoucherQueryRepo,
        voucher_command_repo: IVoucherCommandRepo,
        payment_command_repo: IPaymentCommandRepo,
        seat_reservation_handler: ISeatReservationHandler,
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.resource_repo = resource_repo
        self.enrollment_query_repo = enrollment_query_repo
        self.voucher_query_repo = voucher_query_repo
        self.voucher_command_repo = voucher_command_repo
        self.payment_command_repo = payment_command_repo
        self.seat_reservation_handler = seat_reservation_handler
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        resource_repo: IResourceRepo = Depends(Provide[Container.resource_repo]),
        enrollment_query_repo: IEnrollmentQueryRepo = Depends(
            Provide[Container.enrollment_query_repo]
        ),
        voucher_query_repo: IVoucherQueryRepo = Depends(Provide[Container.voucher_query_repo]),
        voucher_command_repo: IVoucherCommandRepo = Depends(
            Provide[Container.voucher_command_repo]
        ),
        payment_command_repo: IPaymentCommandRepo = Depends(
            Provide[Container.payment_command_repo]
        ),
        seat_reservation_handler: ISeatReservationHandler = Depends(
            Provide[Container.seat_reservation_handler]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(
            resource_repo=resource_repo,
            enrollment_query_repo=enrollment_query_repo,
            voucher_query_repo=voucher_query_repo,
            voucher_command_repo=voucher_command_repo,
            payment_command_repo=payment_command_repo,
            seat_reservation_handler=seat_reservation_handler,
            payment_gateway=payment_gateway,
        )

    @Logger.io
    async def execute(self, *, command: CreateOrderCommand) -> CreateOrderResult:
        with (
            self.tracer.start_as_current_span(
                'use_case.create_order',
                attributes={
                    'resource.id': command.resource_id,
                    'order.ticket_count': len(command.parties),
                    'order.has_voucher': bool(command.voucher_code),
                },
            ),
            metrics.order_duration.time(),
        ):
            try:
                return await self._create_order(command)
            except SeatUnavailableError:
                metrics.record_order_failed(reason='seat_unavailable')
                raise
            except UpstreamError:
                metrics.record_order_failed(reason='gateway')
                raise
            except CustomBaseError:
                metrics.record_order_failed(reason='validation')
                raise

    async def _create_order(self, command: CreateOrderCommand) -> CreateOrderResult:
        resource = await self.resource_repo.get_by_id(resource_id=command.resource_id)
        if not resource:
            raise NotFoundError('Event not found')
        resource.ensure_open_for_booking()

        buyer, attendees = self._validate_parties(command)
        parties = [buyer, *attendees]
        await self._ensure_no_active_tickets(resource_id=resource.id, parties=parties)

        resource.ensure_capacity()
        total_tickets = len(parties)
        selected_seats = self._validate_seat_selection(
            resource=resource, command=command, total_tickets=total_tickets
        )

        per_ticket_price, tier = resource.resolve_price(command.tier_id)
        total_amount = per_ticket_price * total_tickets

        voucher, claimed_phones = await self._claim_voucher(
            code=command.voucher_code,
            resource_id=resource.id,
            phones=[party.phone for party in parties],
        )

        metadata = OrderMetadata(
            buyer=buyer,
            attendees=attendees,
            selected_seats=selected_seats,
            price_tier_id=tier.id if tier else None,
            tier_name=tier.name if tier else None,
            total_tickets=total_tickets,
            per_ticket_price=per_ticket_price,
            voucher_id=voucher.id if voucher and claimed_phones else None,
            voucher_code=voucher.code if voucher and claimed_phones else None,
            voucher_claimed_phones=claimed_phones,
        )

        try:
            gateway_order = await self.payment_gateway.create_order(
                amount=total_amount,
                currency=settings.CURRENCY,
                receipt=f'order_{int(time.time() * 1000)}',
                notes=self._gateway_notes(resource=resource, metadata=metadata),
            )
            payment = await self.payment_command_repo.create(
                payment=Payment.create(
                    order_id=gateway_order.id,
                    resource_id=resource.id,
                    type=resource.type,
                    amount=total_amount,
                    metadata=metadata,
                    currency=settings.CURRENCY,
                )
            )
        except Exception:
            await self._release_voucher(metadata=metadata, order_id=None)
            raise

        Logger.base.info(
            f'🧾 [ORDER] Payment {payment.order_id} PENDING: {total_tickets} ticket(s), '
            f'amount={total_amount}'
        )

        if selected_seats:
            try:
                await self.seat_reservation_handler.reserve(
                    resource_id=resource.id, seats=selected_seats, order_id=payment.order_id
                )
            except Exception:
                await self._compensate(order_id=payment.order_id, metadata=metadata)
                raise

        try:
            link = await self.payment_gateway.create_payment_link(
                request=PaymentLinkRequest(
                    order_id=payment.order_id,
                    amount=total_amount,
                    currency=settings.CURRENCY,
                    description=self._link_description(
                        resource=resource, tier_name=metadata.tier_name, total=total_tickets
                    ),
                    customer_name=buyer.name,
                    customer_phone=buyer.phone,
                    customer_email=buyer.email,
                    callback_url=settings.PAYMENT_CALLBACK_URL,
                    notes={'order_id': payment.order_id, 'resource_id': str(resource.id)},
                )
            )
        except UpstreamError:
            # Payment stays PENDING for manual reconciliation
            Logger.base.error(f'❌ [ORDER] Payment link failed for {payment.order_id}')
            raise

        await self.payment_command_repo.set_payment_link(
            order_id=payment.order_id, link_id=link.id, url=link.short_url
        )

        metrics.record_order_created(
            resource_type=resource.type.value,
            has_voucher=bool(claimed_phones),
            has_seats=bool(selected_seats),
        )

        return CreateOrderResult(
            order_id=payment.order_id,
            payment_url=link.short_url,
            payment_link_id=link.id,
            amount=total_amount,
            per_ticket_price=per_ticket_price,
            total_tickets=total_tickets,
            currency=payment.currency,
            status=gateway_order.status,
            claimed_voucher_phones=claimed_phones,
        )

    @staticmethod
    def _validate_parties(command: CreateOrderCommand) -> tuple[Party, List[Party]]:
        buyer = Party(
            name=command.buyer.name.strip(),
            phone=validate_phone(command.buyer.phone, field='buyer phone'),
            email=validate_email_address(command.buyer.email, field='buyer email'),
        )

        attendees: List[Party] = []
        for index, attendee in enumerate(command.attendees, start=1):
            attendees.append(
                Party(
                    name=attendee.name.strip(),
                    phone=validate_phone(attendee.phone, field=f'phone for attendee {index}'),
                    email=validate_email_address(
                        attendee.email, field=f'email for attendee {index}'
                    ),
                )
            )

        seen: set[str] = set()
        for party in [buyer, *attendees]:
            normalized = normalize_phone(party.phone)
            if normalized in seen:
                raise DomainError(f'Duplicate phone number in request: {party.phone}')
            seen.add(normalized)

        return buyer, attendees

    async def _ensure_no_active_tickets(self, *, resource_id: int, parties: List[Party]) -> None:
        taken = await self.enrollment_query_repo.find_active_ticket_phones(
            resource_id=resource_id, phones=[party.phone for party in parties]
        )
        if taken:
            raise DomainError(
                f'Phone number(s) already have a ticket for this event: {", ".join(taken)}'
            )

    @staticmethod
    def _validate_seat_selection(
        *, resource: Resource, command: CreateOrderCommand, total_tickets: int
    ) -> List[SelectedSeat]:
        if not resource.has_seat_arrangement:
            return []
        if not command.selected_seats:
            raise DomainError('Seat selection is required for this event')
        if len(command.selected_seats) != total_tickets:
            raise DomainError(f'Must select {total_tickets} seat(s)')
        return [
            SelectedSeat(seat_label=seat.seat_label.strip().upper(), phone=seat.phone.strip())
            for seat in command.selected_seats
        ]

    async def _claim_voucher(
        self, *, code: str | None, resource_id: int, phones: List[str]
    ) -> tuple[Voucher | None, List[str]]:
        """Never fails the order: any problem means no voucher for anyone"""
        if not code or not code.strip():
            return None, []

        voucher = await self.voucher_query_repo.get_by_code(code=code)
        if voucher is None:
            Logger.base.info(f'🎟️ [ORDER] Voucher {code} not found, continuing without it')
            return None, []
        if not voucher.is_active:
            Logger.base.info(f'🎟️ [ORDER] Voucher {voucher.code} inactive, continuing without it')
            return None, []
        if not voucher.applies_to(resource_id):
            Logger.base.info(
                f'🎟️ [ORDER] Voucher {voucher.code} not valid for resource {resource_id}'
            )
            return None, []

        claimable, left_out = voucher.split_claimable(phones)
        if not claimable:
            metrics.record_voucher_claim(result='exhausted')
            Logger.base.info(f'🎟️ [ORDER] Voucher {voucher.code} has no slot for this order')
            return None, []

        claimed = await self.voucher_command_repo.claim(voucher_id=voucher.id, phones=claimable)
        if claimed is None:
            metrics.record_voucher_claim(result='exhausted')
            Logger.base.info(f'🎟️ [ORDER] Voucher {voucher.code} claim lost to another order')
            return None, []

        metrics.record_voucher_claim(result='partial' if left_out else 'claimed')
        if left_out:
            Logger.base.info(
                f'🎟️ [ORDER] Voucher {voucher.code}: {len(claimable)} claimed, '
                f'{len(left_out)} left without'
            )
        return claimed, claimable

    async def _compensate(self, *, order_id: str, metadata: OrderMetadata) -> None:
        Logger.base.warning(f'↩️ [ORDER] Seat reservation failed, rolling back {order_id}')
        try:
            deleted = await self.payment_command_repo.delete(order_id=order_id)
            metrics.record_compensation(action='delete_payment', succeeded=deleted)
        except Exception as e:
            metrics.record_compensation(action='delete_payment', succeeded=False)
            Logger.base.critical(f'🚨 [ORDER] Failed to delete payment {order_id}: {e}')
        await self._release_voucher(metadata=metadata, order_id=order_id)

    async def _release_voucher(self, *, metadata: OrderMetadata, order_id: str | None) -> None:
        if metadata.voucher_id is None or not metadata.voucher_claimed_phones:
            return
        try:
            await self.voucher_command_repo.release(
                voucher_id=metadata.voucher_id, phones=metadata.voucher_claimed_phones
            )
            metrics.record_compensation(action='release_voucher', succeeded=True)
        except Exception as e:
            metrics.record_compensation(action='release_voucher', succeeded=False)
            Logger.base.critical(
                f'🚨 [ORDER] Failed to release voucher {metadata.voucher_id} '
                f'for order {order_id}: {e}'
            )

    @staticmethod
    def _gateway_notes(*, resource: Resource, metadata: OrderMetadata) -> dict[str, Any]:
        notes: dict[str, Any] = {
            'type': resource.type.value,
            'resource_id': str(resource.id),
            'resource_name': resource.name,
            'total_tickets': metadata.total_tickets,
            'buyer_name': metadata.buyer.name,
            'buyer_email': metadata.buyer.email or '',
            'buyer_phone': metadata.buyer.phone,
        }
        if metadata.tier_name:
            notes['tier_name'] = metadata.tier_name
        return notes

    @staticmethod
    def _link_description(*, resource: Resource, tier_name: str | None, total: int) -> str:
        tier = f' - {tier_name}' if tier_name else ''
        plural = 's' if total > 1 else ''
        return f'Payment for {resource.name}{tier} ({total} ticket{plural})'
