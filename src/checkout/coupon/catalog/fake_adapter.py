"""In-memory coupon catalog for development and testing.

Coupons are seeded as wire payloads, so the adapter exercises the same
parsing path as a remote catalog. It can be configured at runtime to fail
with a transient error, to refuse codes whose usage limit is exhausted, or
to hold lookups until released (to test superseded and cancelled lookups).
"""

import asyncio

from checkout.coupon.catalog.port import CouponCatalog
from checkout.coupon.coupon import Coupon, normalize_code
from checkout.coupon.schemas import CouponPayload
from checkout.shared.errors import (
    CouponRejected,
    RejectionReason,
    TransientError,
    TransientKind,
)


class FakeCouponCatalog(CouponCatalog):
    """Configurable fake coupon catalog."""

    def __init__(self, coupons: list[dict] | None = None) -> None:
        self._coupons: dict[tuple[str, str], Coupon] = {}
        self.exhausted_codes: set[str] = set()
        self.transient_failure: TransientKind | None = None
        self.gate: asyncio.Event | None = None
        self.calls: list[dict] = []
        for payload in coupons or []:
            self.add(payload)

    def add(self, payload: dict) -> Coupon:
        """Publish a coupon given as a catalog payload."""
        coupon = CouponPayload.model_validate(payload).to_coupon()
        self._coupons[(normalize_code(coupon.code), str(coupon.business_id))] = coupon
        return coupon

    def exhaust(self, code: str) -> None:
        """Make the server report the coupon's usage limit as reached."""
        self.exhausted_codes.add(normalize_code(code))

    def configure(self, transient_failure: TransientKind | None = None) -> None:
        """Fail every lookup with ``transient_failure`` (None restores normal lookups)."""
        self.transient_failure = transient_failure

    def hold(self) -> asyncio.Event:
        """Block lookups until the returned event is set."""
        self.gate = asyncio.Event()
        return self.gate

    async def lookup(self, code: str, business_id: str) -> Coupon | None:
        self.calls.append({"method": "lookup", "code": code, "business_id": business_id})

        if self.gate is not None:
            await self.gate.wait()

        if self.transient_failure is not None:
            raise TransientError(self.transient_failure, "coupon catalog unavailable")

        key = normalize_code(code)
        if key in self.exhausted_codes:
            raise CouponRejected(RejectionReason.USAGE_LIMIT_EXCEEDED)

        return self._coupons.get((key, str(business_id)))
