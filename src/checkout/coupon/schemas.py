"""Pydantic schema for coupon records received from the coupon catalog.

This is the wire contract (anti-corruption layer) between the remote
catalog and the ``Coupon`` value object. Both snake_case and camelCase keys
are accepted.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from checkout.coupon.coupon import Coupon


class CouponPayload(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    business_id: str
    discount_type: Literal["percentage", "fixed"]
    discount_value: int
    max_discount_cents: int | None = None
    min_order_value_cents: int = Field(ge=0, default=0)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool = True
    usage_limit_type: Literal["unlimited", "total", "per_user"] = "unlimited"
    total_usage_limit: int | None = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "code": "FEST15",
                    "businessId": "biz-001",
                    "discountType": "percentage",
                    "discountValue": 15,
                    "maxDiscountCents": 20000,
                    "minOrderValueCents": 50000,
                    "validUntil": "2026-12-31T23:59:59Z",
                    "isActive": True,
                    "usageLimitType": "per_user",
                }
            ]
        },
    }

    def to_coupon(self) -> Coupon:
        return Coupon(**self.model_dump(exclude_none=True))
