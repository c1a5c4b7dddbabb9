"""
Voucher Command Repository Implementation

The pool guard lives in one statement:

    UPDATE voucher SET claimed_count = claimed_count + :n
    WHERE id = :id AND is_active AND claimed_count + :n <= max_usage

Claim rows are inserted in the same transaction. The composite primary key on
voucher_claim(voucher_id, phone) rejects a phone that already holds a slot, which rolls
the counter back with it.
"""

from typing import AsyncContextManager, Callable, List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.interface.i_voucher_command_repo import IVoucherCommandRepo
from src.service.ticketing.domain.entity.voucher_entity import Voucher
from src.service.ticketing.driven_adapter.model.voucher_model import (
    VoucherClaimModel,
    VoucherModel,
)
from src.service.ticketing.driven_adapter.repo.voucher_query_repo_impl import (
    VoucherQueryRepoImpl,
)


class VoucherCommandRepoImpl(IVoucherCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    async def _fetch(session: AsyncSession, voucher_id: int) -> Voucher | None:
        result = await session.execute(
            select(VoucherModel)
            .where(VoucherModel.id == voucher_id)
            .execution_options(populate_existing=True)
        )
        voucher_model = result.scalar_one_or_none()
        if not voucher_model:
            return None
        return VoucherQueryRepoImpl._model_to_entity(voucher_model)

    @Logger.io
    async def claim(self, *, voucher_id: int, phones: List[str]) -> Voucher | None:
        normalized = list(dict.fromkeys(normalize_phone(phone) for phone in phones))
        if not normalized:
            return None

        async with self.session_factory() as session:
            try:
                # Counter guard first: it takes the write lock before anything is read
                result = await session.execute(
                    update(VoucherModel)
                    .where(
                        VoucherModel.id == voucher_id,
                        VoucherModel.is_active.is_(True),
                        VoucherModel.claimed_count + len(normalized) <= VoucherModel.max_usage,
                    )
                    .values(claimed_count=VoucherModel.claimed_count + len(normalized))
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    await session.rollback()
                    Logger.base.info(
                        f'🎟️ [VOUCHER] Claim lost for voucher {voucher_id}: pool exhausted'
                    )
                    return None

                session.add_all(
                    [VoucherClaimModel(voucher_id=voucher_id, phone=phone) for phone in normalized]
                )
                await session.flush()
                await session.commit()
            except IntegrityError:
                await session.rollback()
                Logger.base.info(
                    f'🎟️ [VOUCHER] Claim lost for voucher {voucher_id}: phone already holds a slot'
                )
                return None

            Logger.base.info(f'🎟️ [VOUCHER] Claimed {len(normalized)} slot(s) on voucher {voucher_id}')
            return await self._fetch(session, voucher_id)

    @Logger.io
    async def release(self, *, voucher_id: int, phones: List[str]) -> int:
        normalized = list(dict.fromkeys(normalize_phone(phone) for phone in phones))
        if not normalized:
            return 0

        async with self.session_factory() as session:
            result = await session.execute(
                delete(VoucherClaimModel).where(
                    VoucherClaimModel.voucher_id == voucher_id,
                    VoucherClaimModel.phone.in_(normalized),
                )
            )
            released = result.rowcount  # type: ignore[attr-defined]
            if released:
                await session.execute(
                    update(VoucherModel)
                    .where(VoucherModel.id == voucher_id)
                    .values(claimed_count=VoucherModel.claimed_count - released)
                )
            await session.commit()

            Logger.base.info(f'🎟️ [VOUCHER] Released {released} slot(s) on voucher {voucher_id}')
            return released

    @Logger.io
    async def confirm(self, *, voucher_id: int, count: int) -> bool:
        if count <= 0:
            return False

        async with self.session_factory() as session:
            result = await session.execute(
                update(VoucherModel)
                .where(
                    VoucherModel.id == voucher_id,
                    VoucherModel.usage_count + count <= VoucherModel.max_usage,
                )
                .values(usage_count=VoucherModel.usage_count + count)
            )
            await session.commit()
            return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def redeem(self, *, phone: str) -> Voucher | None:
        normalized = normalize_phone(phone)

        async with self.session_factory() as session:
            voucher_id = (
                await session.execute(
                    select(VoucherClaimModel.voucher_id)
                    .where(VoucherClaimModel.phone == normalized)
                    .order_by(VoucherClaimModel.voucher_id)
                    .limit(1)
                )
            ).scalar_one_or_none()
            if voucher_id is None:
                return None

            result = await session.execute(
                delete(VoucherClaimModel).where(
                    VoucherClaimModel.voucher_id == voucher_id,
                    VoucherClaimModel.phone == normalized,
                )
            )
            # A concurrent redeem already removed it
            if result.rowcount != 1:  # type: ignore[attr-defined]
                await session.rollback()
                return None

            await session.execute(
                update(VoucherModel)
                .where(VoucherModel.id == voucher_id)
                .values(claimed_count=VoucherModel.claimed_count - 1)
            )
            await session.commit()

            Logger.base.info(f'🎟️ [VOUCHER] Redeemed voucher {voucher_id}')
            return await self._fetch(session, voucher_id)
