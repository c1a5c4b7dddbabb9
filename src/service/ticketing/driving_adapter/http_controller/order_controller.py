from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.create_order_use_case import CreateOrderUseCase
from src.service.ticketing.app.dto.order_dto import CreateOrderCommand
from src.service.ticketing.app.query.get_payment_status_use_case import GetPaymentStatusUseCase
from src.service.ticketing.domain.value_object.order_metadata import Party, SelectedSeat
from src.service.ticketing.driving_adapter.http_controller.schema.order_schema import (
    OrderCreateRequest,
    OrderCreateResponse,
    PartySchema,
    PaymentStatusResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _to_party(schema: PartySchema) -> Party:
    return Party(name=schema.name, phone=schema.phone, email=schema.email)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_order(
    request: OrderCreateRequest,
    use_case: CreateOrderUseCase = Depends(CreateOrderUseCase.depends),
) -> OrderCreateResponse:
    with tracer.start_as_current_span('controller.create_order') as span:
        span.set_attribute('resource.id', request.resource_id)

        result = await use_case.execute(
            command=CreateOrderCommand(
                buyer=_to_party(request.buyer),
                attendees=[_to_party(attendee) for attendee in request.attendees],
                resource_id=request.resource_id,
                tier_id=request.tier_id,
                voucher_code=request.voucher_code,
                selected_seats=[
                    SelectedSeat(seat_label=seat.seat_label, phone=seat.phone)
                    for seat in request.selected_seats
                ],
            )
        )

        span.set_attribute('order.id', result.order_id)
        return OrderCreateResponse(
            order_id=result.order_id,
            payment_url=result.payment_url,
            payment_link_id=result.payment_link_id,
            amount=result.amount,
            per_ticket_price=result.per_ticket_price,
            total_tickets=result.total_tickets,
            currency=result.currency,
            status=result.status,
            claimed_voucher_phones=result.claimed_voucher_phones,
        )


@router.get('/{order_id}/status')
@Logger.io
async def get_order_status(
    order_id: str,
    use_case: GetPaymentStatusUseCase = Depends(GetPaymentStatusUseCase.depends),
) -> PaymentStatusResponse:
    payment = await use_case.execute(order_id=order_id)
    return PaymentStatusResponse(
        order_id=payment.order_id,
        gateway_payment_id=payment.gateway_payment_id,
        status=payment.status.value,
        amount=payment.final_amount,
        failure_reason=payment.failure_reason,
        purchased_at=payment.purchased_at,
    )
