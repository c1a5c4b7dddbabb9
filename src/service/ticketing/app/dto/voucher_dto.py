"""Voucher engine results."""

from typing import List

import attrs

from src.service.ticketing.domain.entity.voucher_entity import Voucher


@attrs.define(frozen=True)
class VoucherClaimResult:
    voucher: Voucher
    claimed_for: List[str]
    remaining_slots: int


@attrs.define(frozen=True)
class VoucherRedeemResult:
    voucher: Voucher
    redeemed_phone: str
