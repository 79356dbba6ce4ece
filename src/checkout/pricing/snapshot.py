"""Immutable pricing views handed to the UI layer."""

from dataclasses import dataclass

from checkout.coupon.state import CouponApplicationState, Validating
from checkout.shared.money import format_cents


@dataclass(frozen=True)
class LineView:
    dish_id: str
    name: str
    unit_price_cents: int
    quantity: int
    line_total_cents: int


@dataclass(frozen=True)
class PricingSnapshot:
    """Prices of the cart at one point in time.

    Recomputed after every mutation; never stored.
    """

    business_id: str | None
    lines: tuple[LineView, ...]
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    item_count: int
    coupon_state: CouponApplicationState

    @property
    def is_empty(self) -> bool:
        return self.item_count == 0

    @property
    def can_checkout(self) -> bool:
        """Checkout is offered only for a non-empty cart with no lookup in flight."""
        return not self.is_empty and not isinstance(self.coupon_state, Validating)

    @property
    def formatted_total(self) -> str:
        return format_cents(self.total_cents)
