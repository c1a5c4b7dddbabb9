from fastapi import APIRouter, Depends, Header, Request

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.handle_payment_webhook_use_case import (
    HandlePaymentWebhookUseCase,
)
from src.service.ticketing.driving_adapter.http_controller.schema.webhook_schema import (
    WebhookAckResponse,
)


router = APIRouter()


@router.post('/payment')
@Logger.io
async def payment_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    use_case: HandlePaymentWebhookUseCase = Depends(HandlePaymentWebhookUseCase.depends),
) -> WebhookAckResponse:
    # Signature is computed over the exact bytes received, so the body is never re-serialized
    raw_body = await request.body()
    await use_case.execute(raw_body=raw_body, signature=x_razorpay_signature)
    return WebhookAckResponse(status='ok')
