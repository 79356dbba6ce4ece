"""Discount and total arithmetic in integer cents.

Both discount models end with the same clamp: a coupon never takes off more
than the subtotal, and a malformed negative value never adds to the bill.

    percentage: subtotal * value / 100 (truncated), capped by max_discount_cents
    fixed:      value
    discount  = max(0, min(raw, subtotal))
    total     = max(0, subtotal - discount)
"""

from checkout.coupon.coupon import Coupon
from checkout.coupon.state import Applied, CouponApplicationState
from checkout.pricing.snapshot import LineView, PricingSnapshot
from checkout.shared.money import clamp, line_total, percentage_of


def compute_discount_cents(coupon: Coupon, subtotal_cents: int) -> int:
    if coupon.is_percentage:
        raw = percentage_of(subtotal_cents, coupon.discount_value)
        if coupon.max_discount_cents is not None:
            raw = min(raw, coupon.max_discount_cents)
    else:
        raw = coupon.discount_value

    return clamp(raw, 0, subtotal_cents)


def compute_final_total_cents(subtotal_cents: int, discount_cents: int) -> int:
    return max(0, subtotal_cents - discount_cents)


def build_snapshot(cart, coupon_state: CouponApplicationState) -> PricingSnapshot:
    """Price ``cart`` under ``coupon_state``.

    Only an ``Applied`` coupon discounts; every other state prices at zero
    discount.
    """
    lines = tuple(
        LineView(
            dish_id=str(item.dish_id),
            name=item.name,
            unit_price_cents=item.unit_price_cents,
            quantity=item.quantity,
            line_total_cents=line_total(item.unit_price_cents, item.quantity),
        )
        for item in cart.items
    )
    subtotal = sum(line.line_total_cents for line in lines)
    discount = coupon_state.discount_cents if isinstance(coupon_state, Applied) else 0

    return PricingSnapshot(
        business_id=str(cart.business_id) if cart.business_id else None,
        lines=lines,
        subtotal_cents=subtotal,
        discount_cents=discount,
        total_cents=compute_final_total_cents(subtotal, discount),
        item_count=sum(line.quantity for line in lines),
        coupon_state=coupon_state,
    )
