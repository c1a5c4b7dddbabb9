"""
Integration tests for VoucherCommandRepoImpl

Runs the guarded claim/confirm/redeem statements against a real SQLite database.
"""

import asyncio

import pytest

from src.platform.database.orm_db_setting import Database
from src.service.ticketing.driven_adapter.model.voucher_model import VoucherModel
from src.service.ticketing.driven_adapter.repo.voucher_command_repo_impl import (
    VoucherCommandRepoImpl,
)
from src.service.ticketing.driven_adapter.repo.voucher_query_repo_impl import (
    VoucherQueryRepoImpl,
)


async def _seed_voucher(database: Database, *, max_usage: int, is_active: bool = True) -> int:
    async with database.session() as session:
        voucher_model = VoucherModel(
            code='EARLYBIRD',
            title='Early Bird',
            max_usage=max_usage,
            is_active=is_active,
            applicable_resources=[],
        )
        session.add(voucher_model)
        await session.commit()
        return voucher_model.id


@pytest.mark.integration
class TestVoucherClaimGuard:
    @pytest.fixture
    def command_repo(self, database: Database) -> VoucherCommandRepoImpl:
        return VoucherCommandRepoImpl(session_factory=database.session)

    @pytest.fixture
    def query_repo(self, database: Database) -> VoucherQueryRepoImpl:
        return VoucherQueryRepoImpl(session_factory=database.session)

    @pytest.mark.asyncio
    async def test_claim_within_pool(
        self, database: Database, command_repo: VoucherCommandRepoImpl
    ) -> None:
        # Arrange
        voucher_id = await _seed_voucher(database, max_usage=3)

        # Act
        voucher = await command_repo.claim(
            voucher_id=voucher_id, phones=['919876543210', '9123456789']
        )

        # Assert
        assert voucher is not None
        assert sorted(voucher.claimed_phones) == ['9123456789', '9876543210']
        assert voucher.available_slots == 1

    @pytest.mark.asyncio
    async def test_claim_past_pool__nothing_written(
        self,
        database: Database,
        command_repo: VoucherCommandRepoImpl,
        query_repo: VoucherQueryRepoImpl,
    ) -> None:
        voucher_id = await _seed_voucher(database, max_usage=2)
        assert await command_repo.claim(voucher_id=voucher_id, phones=['9000000001'])

        lost = await command_repo.claim(
            voucher_id=voucher_id, phones=['9000000002', '9000000003']
        )

        assert lost is None
        voucher = await query_repo.get_by_code(code='earlybird')
        assert voucher is not None
        assert voucher.claimed_phones == ['9000000001']

    @pytest.mark.asyncio
    async def test_concurrent_claimants__pool_never_exceeded(
        self,
        database: Database,
        command_repo: VoucherCommandRepoImpl,
        query_repo: VoucherQueryRepoImpl,
    ) -> None:
        # Arrange - five buyers racing for three slots
        voucher_id = await _seed_voucher(database, max_usage=3)

        # Act
        results = await asyncio.gather(
            *(
                command_repo.claim(voucher_id=voucher_id, phones=[f'900000000{i}'])
                for i in range(5)
            )
        )

        # Assert
        assert sum(1 for result in results if result is not None) == 3
        voucher = await query_repo.get_by_id(voucher_id=voucher_id)
        assert voucher is not None
        assert len(voucher.claimed_phones) == 3
        assert voucher.available_slots == 0

    @pytest.mark.asyncio
    async def test_two_concurrent_claims_for_last_slot__one_wins(
        self,
        database: Database,
        command_repo: VoucherCommandRepoImpl,
        query_repo: VoucherQueryRepoImpl,
    ) -> None:
        # Arrange - max_usage=2 with one slot already taken
        voucher_id = await _seed_voucher(database, max_usage=2)
        assert await command_repo.claim(voucher_id=voucher_id, phones=['9000000001'])

        # Act
        first, second = await asyncio.gather(
            command_repo.claim(voucher_id=voucher_id, phones=['9000000002']),
            command_repo.claim(voucher_id=voucher_id, phones=['9000000003']),
        )

        # Assert
        assert [first is not None, second is not None].count(True) == 1
        voucher = await query_repo.get_by_id(voucher_id=voucher_id)
        assert voucher is not None
        assert len(voucher.claimed_phones) == 2
        assert '9000000001' in voucher.claimed_phones

    @pytest.mark.asyncio
    async def test_phone_already_holding__counter_rolled_back(
        self,
        database: Database,
        command_repo: VoucherCommandRepoImpl,
        query_repo: VoucherQueryRepoImpl,
    ) -> None:
        voucher_id = await _seed_voucher(database, max_usage=5)
        await command_repo.claim(voucher_id=voucher_id, phones=['9876543210'])

        again = await command_repo.claim(voucher_id=voucher_id, phones=['9876543210', '9000000001'])

        assert again is None
        voucher = await query_repo.get_by_id(voucher_id=voucher_id)
        assert voucher is not None
        assert voucher.claimed_phones == ['9876543210']
        async with database.session() as session:
            voucher_model = await session.get(VoucherModel, voucher_id)
            assert voucher_model is not None
            assert voucher_model.claimed_count == 1

    @pytest.mark.asyncio
    async def test_inactive_voucher_cannot_be_claimed(
        self, database: Database, command_repo: VoucherCommandRepoImpl
    ) -> None:
        voucher_id = await _seed_voucher(database, max_usage=5, is_active=False)

        assert await command_repo.claim(voucher_id=voucher_id, phones=['9876543210']) is None


@pytest.mark.integration
class TestVoucherLifecycle:
    @pytest.fixture
    def command_repo(self, database: Database) -> VoucherCommandRepoImpl:
        return VoucherCommandRepoImpl(session_factory=database.session)

    @pytest.mark.asyncio
    async def test_release_frees_slots(
        self, database: Database, command_repo: VoucherCommandRepoImpl
    ) -> None:
        voucher_id = await _seed_voucher(database, max_usage=1)
        await command_repo.claim(voucher_id=voucher_id, phones=['9876543210'])

        released = await command_repo.release(voucher_id=voucher_id, phones=['919876543210'])

        assert released == 1
        assert await command_repo.claim(voucher_id=voucher_id, phones=['9000000001'])

    @pytest.mark.asyncio
    async def test_confirm_bounded_by_max_usage(
        self, database: Database, command_repo: VoucherCommandRepoImpl
    ) -> None:
        voucher_id = await _seed_voucher(database, max_usage=2)

        assert await command_repo.confirm(voucher_id=voucher_id, count=2)
        assert not await command_repo.confirm(voucher_id=voucher_id, count=1)
        assert not await command_repo.confirm(voucher_id=voucher_id, count=0)

    @pytest.mark.asyncio
    async def test_redeem_consumes_claim_once(
        self, database: Database, command_repo: VoucherCommandRepoImpl
    ) -> None:
        voucher_id = await _seed_voucher(database, max_usage=2)
        await command_repo.claim(voucher_id=voucher_id, phones=['9876543210', '9000000001'])

        redeemed = await command_repo.redeem(phone='919876543210')
        second = await command_repo.redeem(phone='9876543210')

        assert redeemed is not None
        assert redeemed.claimed_phones == ['9000000001']
        assert second is None
