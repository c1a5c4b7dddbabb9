from datetime import datetime
from typing import List, Optional

import attrs

from src.service.shared_kernel.domain.value_object.phone import normalize_phone


@attrs.define
class Voucher:
    """
    Scarce discount slots handed out per phone.

    claimed_phones holds every phone that currently owns a slot, whether the order is
    still pending or already paid and waiting to be redeemed at the venue.
    usage_count only counts paid (confirmed) claims.
    """

    id: int
    code: str
    max_usage: int
    title: str = ''
    description: str = ''
    usage_count: int = 0
    claimed_phones: List[str] = attrs.field(factory=list)
    applicable_resources: List[int] = attrs.field(factory=list)
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def available_slots(self) -> int:
        return max(0, self.max_usage - len(self.claimed_phones))

    def holds_phone(self, phone: str) -> bool:
        return normalize_phone(phone) in self.claimed_phones

    def applies_to(self, resource_id: int | None) -> bool:
        if resource_id is None or not self.applicable_resources:
            return True
        return resource_id in self.applicable_resources

    def split_claimable(self, phones: List[str]) -> tuple[List[str], List[str]]:
        """
        Partition phones into (claimable, left_out).

        Already-holding and duplicate phones are dropped; the first ``available_slots``
        remaining phones are claimable, the rest get no voucher.
        """
        eligible: List[str] = []
        for phone in phones:
            normalized = normalize_phone(phone)
            if normalized in self.claimed_phones or normalized in eligible:
                continue
            eligible.append(normalized)
        slots = self.available_slots
        return eligible[:slots], eligible[slots:]
