from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class VoucherCheckAvailabilityRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    phones: List[str] = Field(min_length=1)
    resource_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices('resource_id', 'resourceId')
    )

    class Config:
        json_schema_extra = {
            'example': {'code': 'FREEDRINK', 'phones': ['9876543210', '9123456780'], 'resource_id': 1}
        }


class VoucherResponse(BaseModel):
    id: int
    code: str
    title: str
    description: str
    max_usage: int
    usage_count: int
    available_slots: int
    is_active: bool


class VoucherClaimResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'voucher': {
                    'id': 1,
                    'code': 'FREEDRINK',
                    'title': 'Free welcome drink',
                    'description': 'Show at the bar',
                    'max_usage': 100,
                    'usage_count': 40,
                    'available_slots': 58,
                    'is_active': True,
                },
                'claimed_for': ['9876543210', '9123456780'],
                'remaining_slots': 58,
            }
        },
    }

    voucher: VoucherResponse
    claimed_for: List[str]
    remaining_slots: int


class VoucherRedeemResponse(BaseModel):
    voucher: VoucherResponse
    redeemed_phone: str
