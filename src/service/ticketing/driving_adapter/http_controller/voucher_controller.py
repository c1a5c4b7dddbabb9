from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.claim_voucher_use_case import ClaimVoucherUseCase
from src.service.ticketing.app.command.redeem_voucher_use_case import RedeemVoucherUseCase
from src.service.ticketing.domain.entity.voucher_entity import Voucher
from src.service.ticketing.driving_adapter.http_controller.schema.voucher_schema import (
    VoucherCheckAvailabilityRequest,
    VoucherClaimResponse,
    VoucherRedeemResponse,
    VoucherResponse,
)


router = APIRouter()


def _to_response(voucher: Voucher) -> VoucherResponse:
    return VoucherResponse(
        id=voucher.id,
        code=voucher.code,
        title=voucher.title,
        description=voucher.description,
        max_usage=voucher.max_usage,
        usage_count=voucher.usage_count,
        available_slots=voucher.available_slots,
        is_active=voucher.is_active,
    )


@router.post('/check-availability')
@Logger.io
async def check_availability(
    request: VoucherCheckAvailabilityRequest,
    use_case: ClaimVoucherUseCase = Depends(ClaimVoucherUseCase.depends),
) -> VoucherClaimResponse:
    result = await use_case.execute(
        code=request.code, phones=request.phones, resource_id=request.resource_id
    )
    return VoucherClaimResponse(
        voucher=_to_response(result.voucher),
        claimed_for=result.claimed_for,
        remaining_slots=result.remaining_slots,
    )


@router.get('/redeem')
@Logger.io
async def redeem_voucher(
    phone: str = Query(...),
    use_case: RedeemVoucherUseCase = Depends(RedeemVoucherUseCase.depends),
) -> VoucherRedeemResponse:
    result = await use_case.execute(phone=phone)
    return VoucherRedeemResponse(
        voucher=_to_response(result.voucher), redeemed_phone=result.redeemed_phone
    )
