"""Coupon catalog adapter factory.

Provides get_coupon_catalog() / set_coupon_catalog() to swap implementations.
The adapter is chosen by the COUPON_CATALOG_ADAPTER environment variable
(only "fake" ships with the domain).
"""

import os

from checkout.coupon.catalog.port import CouponCatalog

_current_catalog: CouponCatalog | None = None


def get_coupon_catalog() -> CouponCatalog:
    """Return the configured coupon catalog. Defaults to FakeCouponCatalog."""
    global _current_catalog
    if _current_catalog is None:
        adapter = os.environ.get("COUPON_CATALOG_ADAPTER", "fake")
        if adapter == "fake":
            from checkout.coupon.catalog.fake_adapter import FakeCouponCatalog

            _current_catalog = FakeCouponCatalog()
        else:
            raise ValueError(f"Unknown coupon catalog adapter: {adapter}")
    return _current_catalog


def set_coupon_catalog(catalog: CouponCatalog) -> None:
    """Override the active coupon catalog."""
    global _current_catalog
    _current_catalog = catalog


def reset_coupon_catalog() -> None:
    """Reset to the configured default."""
    global _current_catalog
    _current_catalog = None
