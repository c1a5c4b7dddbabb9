from typing import AsyncContextManager, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_voucher_query_repo import IVoucherQueryRepo
from src.service.ticketing.domain.entity.voucher_entity import Voucher
from src.service.ticketing.driven_adapter.model.voucher_model import VoucherModel


class VoucherQueryRepoImpl(IVoucherQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(voucher_model: VoucherModel) -> Voucher:
        return Voucher(
            id=voucher_model.id,
            code=voucher_model.code,
            max_usage=voucher_model.max_usage,
            title=voucher_model.title,
            description=voucher_model.description,
            usage_count=voucher_model.usage_count,
            claimed_phones=[claim.phone for claim in voucher_model.claims],
            applicable_resources=list(voucher_model.applicable_resources or []),
            is_active=voucher_model.is_active,
            created_at=voucher_model.created_at,
        )

    @Logger.io
    async def get_by_code(self, *, code: str) -> Voucher | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(VoucherModel).where(VoucherModel.code == code.strip().upper())
            )
            voucher_model = result.scalar_one_or_none()
            if not voucher_model:
                return None
            return self._model_to_entity(voucher_model)

    @Logger.io
    async def get_by_id(self, *, voucher_id: int) -> Voucher | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(VoucherModel).where(VoucherModel.id == voucher_id)
            )
            voucher_model = result.scalar_one_or_none()
            if not voucher_model:
                return None
            return self._model_to_entity(voucher_model)
