"""Where the cart's coupon is in its lifecycle.

    NoCoupon --apply--> Validating --ok--> Applied
                            |                  |
                            +--fail--> Rejected <--subtotal below minimum--+
    Applied | Rejected --remove--> NoCoupon
    Rejected | Applied --apply--> Validating

The states are immutable; the cart controller swaps one for another.
"""

from dataclasses import dataclass

from checkout.coupon.coupon import Coupon, normalize_code
from checkout.shared.errors import RejectionReason


@dataclass(frozen=True)
class NoCoupon:
    """No coupon has been entered."""

    code = None


@dataclass(frozen=True)
class Validating:
    """A lookup for ``code`` is in flight."""

    code: str


@dataclass(frozen=True)
class Applied:
    """``coupon`` is applied and currently worth ``discount_cents``."""

    coupon: Coupon
    discount_cents: int

    @property
    def code(self) -> str:
        return normalize_code(self.coupon.code)


@dataclass(frozen=True)
class Rejected:
    """``code`` was refused. ``coupon`` is kept when it was found but not eligible."""

    code: str
    reason: RejectionReason
    message: str
    coupon: Coupon | None = None


CouponApplicationState = NoCoupon | Validating | Applied | Rejected
