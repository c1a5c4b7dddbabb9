import pytest

from src.platform.exception.exceptions import DomainError
from src.service.shared_kernel.domain.value_object.phone import (
    normalize_phone,
    validate_email_address,
    validate_normalized_phone,
    validate_phone,
)
from src.service.ticketing.domain.entity.voucher_entity import Voucher


@pytest.mark.unit
class TestPhoneRules:
    @pytest.mark.parametrize(
        'raw, expected',
        [
            ('9876543210', '9876543210'),
            ('919876543210', '9876543210'),
            (' 9876543210 ', '9876543210'),
        ],
    )
    def test_normalize_keeps_last_ten_digits(self, raw: str, expected: str) -> None:
        assert normalize_phone(raw) == expected

    def test_validate_phone__accepts_country_code_form(self) -> None:
        assert validate_phone('919876543210') == '919876543210'

    @pytest.mark.parametrize('raw', ['', '12345', '+919876543210', '98765-43210'])
    def test_validate_phone__rejects(self, raw: str) -> None:
        with pytest.raises(DomainError):
            validate_phone(raw)

    def test_validate_normalized_phone__rejects_letters(self) -> None:
        with pytest.raises(DomainError, match='Must be 10 digits'):
            validate_normalized_phone('98765abcde')

    def test_validate_email__empty_is_none(self) -> None:
        assert validate_email_address('  ') is None

    def test_validate_email__lowercases(self) -> None:
        assert validate_email_address('Asha@Mailbox.org') == 'asha@mailbox.org'

    def test_validate_email__rejects_garbage(self) -> None:
        with pytest.raises(DomainError, match='Invalid email'):
            validate_email_address('not-an-email')


@pytest.mark.unit
class TestVoucherEntity:
    def test_available_slots(self) -> None:
        voucher = Voucher(id=1, code='FREE', max_usage=3, claimed_phones=['9876543210'])

        assert voucher.available_slots == 2

    def test_split_claimable__partial_in_submission_order(self) -> None:
        voucher = Voucher(id=1, code='FREE', max_usage=3, claimed_phones=['9000000001'])

        claimable, left_out = voucher.split_claimable(
            ['919876543210', '9123456789', '9000000002']
        )

        assert claimable == ['9876543210', '9123456789']
        assert left_out == ['9000000002']

    def test_split_claimable__skips_holders_and_duplicates(self) -> None:
        voucher = Voucher(id=1, code='FREE', max_usage=5, claimed_phones=['9876543210'])

        claimable, left_out = voucher.split_claimable(
            ['9876543210', '9123456789', '919123456789']
        )

        assert claimable == ['9123456789']
        assert left_out == []

    def test_applies_to__empty_list_means_every_resource(self) -> None:
        assert Voucher(id=1, code='FREE', max_usage=1).applies_to(42)

    def test_applies_to__restricted(self) -> None:
        voucher = Voucher(id=1, code='FREE', max_usage=1, applicable_resources=[7])

        assert voucher.applies_to(7)
        assert not voucher.applies_to(8)
