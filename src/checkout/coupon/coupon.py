"""A business's coupon as read from the coupon catalog.

Coupons are never mutated locally. Usage counters and limits live on the
server; ``usage_limit_type`` and ``total_usage_limit`` are carried for
display only.
"""

from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from checkout.domain import checkout
from checkout.shared.money import format_cents


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class UsageLimitType(Enum):
    UNLIMITED = "unlimited"
    TOTAL = "total"
    PER_USER = "per_user"


def normalize_code(code) -> str:
    """Coupon codes are matched case-insensitively and without surrounding spaces."""
    return (code or "").strip().upper()


@checkout.value_object
class Coupon:
    """Discount rules of a single coupon.

    ``discount_value`` is a whole percentage for percentage coupons and an
    amount in cents for fixed coupons. ``max_discount_cents`` caps percentage
    coupons only. The value is not range-checked; the pricing
    engine clamps whatever the server sends.
    """

    code = String(required=True, max_length=50)
    business_id = Identifier(required=True)
    discount_type = String(choices=DiscountType, required=True)
    discount_value = Integer(required=True)
    max_discount_cents = Integer()
    min_order_value_cents = Integer(default=0)
    valid_from = DateTime()
    valid_until = DateTime()
    is_active = Boolean(default=True)
    usage_limit_type = String(choices=UsageLimitType, default=UsageLimitType.UNLIMITED.value)
    total_usage_limit = Integer()

    @invariant.post
    def minimum_order_value_cannot_be_negative(self):
        if self.min_order_value_cents is not None and self.min_order_value_cents < 0:
            raise ValidationError({"min_order_value_cents": ["Minimum order value cannot be negative"]})

    @property
    def is_percentage(self) -> bool:
        return self.discount_type == DiscountType.PERCENTAGE.value

    @property
    def formatted_discount(self) -> str:
        if self.is_percentage:
            return f"{self.discount_value}% off"
        return f"{format_cents(self.discount_value)} off"

    @property
    def formatted_min_order(self) -> str:
        return format_cents(self.min_order_value_cents or 0)

    def matches(self, code) -> bool:
        return normalize_code(self.code) == normalize_code(code)
