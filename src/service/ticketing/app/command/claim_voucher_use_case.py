from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError, VoucherExhaustedError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.payment_metrics import metrics
from src.service.shared_kernel.domain.value_object.phone import validate_normalized_phone
from src.service.ticketing.app.dto.voucher_dto import VoucherClaimResult
from src.service.ticketing.app.interface.i_voucher_command_repo import IVoucherCommandRepo
from src.service.ticketing.app.interface.i_voucher_query_repo import IVoucherQueryRepo


class ClaimVoucherUseCase:
    """All-or-nothing claim of one voucher slot per phone."""

    def __init__(
        self,
        *,
        voucher_query_repo: IVoucherQueryRepo,
        voucher_command_repo: IVoucherCommandRepo,
    ) -> None:
        self.voucher_query_repo = voucher_query_repo
        self.voucher_command_repo = voucher_command_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        voucher_query_repo: IVoucherQueryRepo = Depends(Provide[Container.voucher_query_repo]),
        voucher_command_repo: IVoucherCommandRepo = Depends(
            Provide[Container.voucher_command_repo]
        ),
    ) -> Self:
        return cls(voucher_query_repo=voucher_query_repo, voucher_command_repo=voucher_command_repo)

    @Logger.io
    async def execute(
        self, *, code: str, phones: List[str], resource_id: Optional[int] = None
    ) -> VoucherClaimResult:
        with self.tracer.start_as_current_span(
            'use_case.claim_voucher', attributes={'voucher.code': code, 'phones': len(phones)}
        ):
            if not phones:
                raise DomainError('At least one phone number is required')
            normalized = list(dict.fromkeys(validate_normalized_phone(phone) for phone in phones))

            voucher = await self.voucher_query_repo.get_by_code(code=code)
            if not voucher:
                raise NotFoundError('Invalid voucher code')
            if not voucher.is_active:
                raise DomainError('This voucher is not active')
            if not voucher.applies_to(resource_id):
                raise DomainError('This voucher is not valid for this event')
            for phone in normalized:
                if voucher.holds_phone(phone):
                    raise DomainError(f'Phone number {phone} has already claimed this voucher')

            required = len(normalized)
            if voucher.available_slots < required:
                metrics.record_voucher_claim(result='exhausted')
                raise VoucherExhaustedError(
                    available_slots=voucher.available_slots, required_slots=required
                )

            claimed = await self.voucher_command_repo.claim(voucher_id=voucher.id, phones=normalized)
            if claimed is None:
                # Someone else took the slots between the read and the guarded update
                latest = await self.voucher_query_repo.get_by_id(voucher_id=voucher.id)
                metrics.record_voucher_claim(result='exhausted')
                raise VoucherExhaustedError(
                    available_slots=latest.available_slots if latest else 0,
                    required_slots=required,
                )

            metrics.record_voucher_claim(result='claimed')
            Logger.base.info(
                f'🎟️ [VOUCHER] {claimed.code} claimed for {required} phone(s), '
                f'{claimed.available_slots} left'
            )
            return VoucherClaimResult(
                voucher=claimed,
                claimed_for=normalized,
                remaining_slots=claimed.available_slots,
            )
