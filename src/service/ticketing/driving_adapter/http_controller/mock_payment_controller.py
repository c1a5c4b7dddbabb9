from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.complete_mock_payment_use_case import (
    CompleteMockPaymentUseCase,
)


router = APIRouter()


@router.get('/{order_id}')
@Logger.io
async def complete_mock_payment(
    order_id: str,
    use_case: CompleteMockPaymentUseCase = Depends(CompleteMockPaymentUseCase.depends),
) -> dict[str, str]:
    outcome = await use_case.execute(order_id=order_id)
    return {'order_id': order_id, 'result': outcome.value}
