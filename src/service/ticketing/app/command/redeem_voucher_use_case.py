from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import validate_normalized_phone
from src.service.ticketing.app.dto.voucher_dto import VoucherRedeemResult
from src.service.ticketing.app.interface.i_voucher_command_repo import IVoucherCommandRepo


class RedeemVoucherUseCase:
    def __init__(self, *, voucher_command_repo: IVoucherCommandRepo) -> None:
        self.voucher_command_repo = voucher_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        voucher_command_repo: IVoucherCommandRepo = Depends(
            Provide[Container.voucher_command_repo]
        ),
    ) -> Self:
        return cls(voucher_command_repo=voucher_command_repo)

    @Logger.io
    async def execute(self, *, phone: str) -> VoucherRedeemResult:
        normalized = validate_normalized_phone(phone)

        voucher = await self.voucher_command_repo.redeem(phone=normalized)
        if not voucher:
            raise NotFoundError('No voucher found for this phone number or already redeemed')

        Logger.base.info(f'🎁 [VOUCHER] {voucher.code} redeemed at the venue')
        return VoucherRedeemResult(voucher=voucher, redeemed_phone=normalized)
