from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import (
    DomainError,
    NotFoundError,
    VoucherExhaustedError,
)
from src.service.ticketing.app.command.claim_voucher_use_case import ClaimVoucherUseCase
from src.service.ticketing.app.command.redeem_voucher_use_case import RedeemVoucherUseCase
from src.service.ticketing.domain.entity.voucher_entity import Voucher


@pytest.fixture
def voucher_query_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_code.return_value = Voucher(id=1, code='FREE50', max_usage=3)
    return repo


@pytest.fixture
def voucher_command_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def claim_use_case(
    voucher_query_repo: AsyncMock, voucher_command_repo: AsyncMock
) -> ClaimVoucherUseCase:
    return ClaimVoucherUseCase(
        voucher_query_repo=voucher_query_repo, voucher_command_repo=voucher_command_repo
    )


@pytest.mark.unit
class TestClaimVoucher:
    @pytest.mark.asyncio
    async def test_claim__normalizes_and_deduplicates(
        self, claim_use_case: ClaimVoucherUseCase, voucher_command_repo: AsyncMock
    ) -> None:
        # Arrange
        voucher_command_repo.claim.return_value = Voucher(
            id=1, code='FREE50', max_usage=3, claimed_phones=['9876543210']
        )

        # Act
        result = await claim_use_case.execute(
            code='FREE50', phones=['919876543210', '9876543210']
        )

        # Assert
        voucher_command_repo.claim.assert_awaited_once_with(voucher_id=1, phones=['9876543210'])
        assert result.claimed_for == ['9876543210']
        assert result.remaining_slots == 2

    @pytest.mark.asyncio
    async def test_not_enough_slots__nothing_claimed(
        self,
        claim_use_case: ClaimVoucherUseCase,
        voucher_query_repo: AsyncMock,
        voucher_command_repo: AsyncMock,
    ) -> None:
        # Arrange - one slot left, two phones asked
        voucher_query_repo.get_by_code.return_value = Voucher(
            id=1, code='FREE50', max_usage=3, claimed_phones=['9000000001', '9000000002']
        )

        # Act
        with pytest.raises(VoucherExhaustedError) as exc_info:
            await claim_use_case.execute(code='FREE50', phones=['9876543210', '9123456789'])

        # Assert
        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {'available_slots': 1, 'required_slots': 2}
        voucher_command_repo.claim.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race__reports_fresh_slot_count(
        self,
        claim_use_case: ClaimVoucherUseCase,
        voucher_query_repo: AsyncMock,
        voucher_command_repo: AsyncMock,
    ) -> None:
        voucher_command_repo.claim.return_value = None
        voucher_query_repo.get_by_id.return_value = Voucher(
            id=1, code='FREE50', max_usage=3, claimed_phones=['1', '2', '3']
        )

        with pytest.raises(VoucherExhaustedError) as exc_info:
            await claim_use_case.execute(code='FREE50', phones=['9876543210'])

        assert exc_info.value.details['available_slots'] == 0

    @pytest.mark.asyncio
    async def test_phone_already_holding_a_slot(
        self, claim_use_case: ClaimVoucherUseCase, voucher_query_repo: AsyncMock
    ) -> None:
        voucher_query_repo.get_by_code.return_value = Voucher(
            id=1, code='FREE50', max_usage=3, claimed_phones=['9876543210']
        )

        with pytest.raises(DomainError, match='already claimed this voucher'):
            await claim_use_case.execute(code='FREE50', phones=['919876543210'])

    @pytest.mark.asyncio
    async def test_unknown_code(
        self, claim_use_case: ClaimVoucherUseCase, voucher_query_repo: AsyncMock
    ) -> None:
        voucher_query_repo.get_by_code.return_value = None

        with pytest.raises(NotFoundError, match='Invalid voucher code'):
            await claim_use_case.execute(code='NOPE', phones=['9876543210'])

    @pytest.mark.asyncio
    async def test_inactive_voucher(
        self, claim_use_case: ClaimVoucherUseCase, voucher_query_repo: AsyncMock
    ) -> None:
        voucher_query_repo.get_by_code.return_value = Voucher(
            id=1, code='FREE50', max_usage=3, is_active=False
        )

        with pytest.raises(DomainError, match='not active'):
            await claim_use_case.execute(code='FREE50', phones=['9876543210'])

    @pytest.mark.asyncio
    async def test_voucher_for_another_event(
        self, claim_use_case: ClaimVoucherUseCase, voucher_query_repo: AsyncMock
    ) -> None:
        voucher_query_repo.get_by_code.return_value = Voucher(
            id=1, code='FREE50', max_usage=3, applicable_resources=[9]
        )

        with pytest.raises(DomainError, match='not valid for this event'):
            await claim_use_case.execute(code='FREE50', phones=['9876543210'], resource_id=7)

    @pytest.mark.asyncio
    async def test_empty_phone_list(self, claim_use_case: ClaimVoucherUseCase) -> None:
        with pytest.raises(DomainError, match='At least one phone'):
            await claim_use_case.execute(code='FREE50', phones=[])

    @pytest.mark.asyncio
    async def test_invalid_phone(self, claim_use_case: ClaimVoucherUseCase) -> None:
        with pytest.raises(DomainError, match='Must be 10 digits'):
            await claim_use_case.execute(code='FREE50', phones=['12345'])


@pytest.mark.unit
class TestRedeemVoucher:
    @pytest.mark.asyncio
    async def test_redeem__returns_voucher(self, voucher_command_repo: AsyncMock) -> None:
        voucher_command_repo.redeem.return_value = Voucher(id=1, code='FREE50', max_usage=3)
        use_case = RedeemVoucherUseCase(voucher_command_repo=voucher_command_repo)

        result = await use_case.execute(phone='919876543210')

        voucher_command_repo.redeem.assert_awaited_once_with(phone='9876543210')
        assert result.redeemed_phone == '9876543210'
        assert result.voucher.code == 'FREE50'

    @pytest.mark.asyncio
    async def test_redeem__nothing_to_redeem(self, voucher_command_repo: AsyncMock) -> None:
        voucher_command_repo.redeem.return_value = None
        use_case = RedeemVoucherUseCase(voucher_command_repo=voucher_command_repo)

        with pytest.raises(NotFoundError, match='already redeemed'):
            await use_case.execute(phone='9876543210')
