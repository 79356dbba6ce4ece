"""Coupon catalog port (abstract interface).

The catalog is the remote source of coupons. The checkout domain programs
against this port; adapters are swapped via configuration.
"""

from abc import ABC, abstractmethod

from checkout.coupon.coupon import Coupon


class CouponCatalog(ABC):
    """Abstract coupon catalog interface."""

    @abstractmethod
    async def lookup(self, code: str, business_id: str) -> Coupon | None:
        """Fetch the coupon ``code`` of ``business_id``.

        ``code`` is already upper-cased by the caller.

        Returns:
            The coupon, or None when the business has no such coupon.

        Raises:
            TransientError: the catalog could not be reached.
            CouponRejected: the server refused the coupon outright
                (``USAGE_LIMIT_EXCEEDED``).
        """
        ...
