"""Coupon eligibility rules.

``validate`` is pure: it looks only at an already-fetched coupon, the cart
subtotal and the current time. Rules are checked in a fixed order and the
first failing rule decides the rejection, so the same cart and coupon always
produce the same message.

Usage limits are not checked here. The coupon catalog reports
``USAGE_LIMIT_EXCEEDED`` itself and that rejection is passed through as is.
"""

from datetime import UTC, datetime

from checkout.coupon.coupon import Coupon
from checkout.shared.errors import CouponRejected, RejectionReason
from checkout.shared.money import format_cents


def _aware(moment: datetime) -> datetime:
    # Naive timestamps from the catalog are UTC
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=UTC)


def below_minimum(coupon: Coupon) -> CouponRejected:
    return CouponRejected(
        RejectionReason.BELOW_MINIMUM,
        f"Minimum order value of {format_cents(coupon.min_order_value_cents or 0)} required",
    )


def meets_minimum(coupon: Coupon, subtotal_cents: int) -> bool:
    return subtotal_cents >= (coupon.min_order_value_cents or 0)


def validate(coupon: Coupon, subtotal_cents: int, now: datetime | None = None) -> Coupon:
    """Return ``coupon`` if it can be applied to a cart worth ``subtotal_cents``.

    Raises:
        CouponRejected: with the reason of the first rule that fails.
    """
    now = _aware(now or datetime.now(UTC))

    if not coupon.is_active:
        raise CouponRejected(RejectionReason.INACTIVE)

    if coupon.valid_until is not None and now > _aware(coupon.valid_until):
        raise CouponRejected(RejectionReason.EXPIRED)

    if coupon.valid_from is not None and now < _aware(coupon.valid_from):
        raise CouponRejected(RejectionReason.NOT_YET_VALID)

    if not meets_minimum(coupon, subtotal_cents):
        raise below_minimum(coupon)

    return coupon
