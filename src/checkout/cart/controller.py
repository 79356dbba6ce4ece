"""UI-facing state container for one cart.

Owns the ``Cart`` aggregate and the coupon application state, and returns a
fresh ``PricingSnapshot`` from every call. Collaborators (coupon catalog,
order creation, cart store) are injected at construction.

The controller is driven from a single event loop. Synchronous mutations
never suspend, so they are serialized by construction. There are two awaits:

- The coupon lookup. Each lookup is tagged with a generation number, and
  any change of business, ``clear()``, ``remove_coupon()``, a newer
  ``apply_coupon()`` or a checkout moves the generation on, so a late answer
  for an older lookup is dropped instead of applied.
- The order creation call. While it is in flight the cart is frozen: every
  mutation and a second ``checkout()`` raise ``CHECKOUT_IN_PROGRESS``, so the
  cart that gets cleared is exactly the cart that was ordered.

Cart events leave the aggregate through the domain repository after every
change, so the controller is used inside an active ``checkout`` domain
context.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from protean import current_domain

from checkout.cart.cart import Cart
from checkout.cart.persistence import CartStore
from checkout.coupon.catalog import get_coupon_catalog
from checkout.coupon.catalog.port import CouponCatalog
from checkout.coupon.coupon import normalize_code
from checkout.coupon.state import (
    Applied,
    CouponApplicationState,
    NoCoupon,
    Rejected,
    Validating,
)
from checkout.coupon.validation import below_minimum, meets_minimum, validate
from checkout.order import get_order_creation
from checkout.order.port import OrderCreation, OrderReceipt
from checkout.order.schemas import OrderLine, OrderRequest
from checkout.pricing.engine import build_snapshot, compute_discount_cents
from checkout.pricing.snapshot import PricingSnapshot
from checkout.shared.errors import (
    CartStateError,
    CouponRejected,
    RejectionReason,
    StateErrorKind,
    TransientError,
)

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CartController:
    def __init__(
        self,
        cart: Cart | None = None,
        coupon_catalog: CouponCatalog | None = None,
        order_creation: OrderCreation | None = None,
        store: CartStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._cart = cart or Cart.create()
        self._catalog = coupon_catalog or get_coupon_catalog()
        self._order_creation = order_creation or get_order_creation()
        self._store = store
        self._clock = clock
        self._state: CouponApplicationState = NoCoupon()
        self._settled: CouponApplicationState = self._state
        self._generation = 0
        self._checking_out = False
        self._saved_coupon_code: str | None = None

    @classmethod
    def restore(
        cls,
        store: CartStore,
        coupon_catalog: CouponCatalog | None = None,
        order_creation: OrderCreation | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> "CartController":
        """Rebuild the controller from the cart saved in ``store``.

        A saved coupon code is kept aside until ``resume_coupon()`` validates
        it again.
        """
        record = store.load()
        cart = Cart.from_record(record) if record is not None else None
        controller = cls(
            cart=cart,
            coupon_catalog=coupon_catalog,
            order_creation=order_creation,
            store=store,
            clock=clock,
        )
        if record is not None and record.applied_coupon_code:
            controller._saved_coupon_code = record.applied_coupon_code
        return controller

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def coupon_state(self) -> CouponApplicationState:
        return self._state

    @property
    def snapshot(self) -> PricingSnapshot:
        return build_snapshot(self._cart, self._state)

    def get_item_count(self) -> int:
        return self._cart.item_count

    def get_subtotal_cents(self) -> int:
        return self._cart.subtotal_cents

    def contains(self, dish_id) -> bool:
        return self._cart.find_item(dish_id) is not None

    def get_quantity(self, dish_id) -> int:
        item = self._cart.find_item(dish_id)
        return item.quantity if item else 0

    # -------------------------------------------------------------------
    # Cart mutations
    # -------------------------------------------------------------------
    def add_item(self, dish) -> PricingSnapshot:
        self._ensure_not_checking_out()
        self._cart.add_item(dish)
        return self._changed()

    def remove_item(self, dish_id) -> PricingSnapshot:
        self._ensure_not_checking_out()
        self._cart.remove_item(dish_id)
        return self._changed()

    def update_quantity(self, dish_id, quantity: int) -> PricingSnapshot:
        self._ensure_not_checking_out()
        self._cart.update_quantity(dish_id, quantity)
        return self._changed()

    def increment_quantity(self, dish_id) -> PricingSnapshot:
        if not self.contains(dish_id):
            return self.snapshot
        return self.update_quantity(dish_id, self.get_quantity(dish_id) + 1)

    def decrement_quantity(self, dish_id) -> PricingSnapshot:
        """Take one unit off; the last unit removes the dish."""
        if not self.contains(dish_id):
            return self.snapshot
        return self.update_quantity(dish_id, self.get_quantity(dish_id) - 1)

    def set_business_id(self, business_id) -> PricingSnapshot:
        """Scope the cart to ``business_id``; another business's items and coupon are dropped."""
        self._ensure_not_checking_out()
        if self._cart.switch_business(business_id):
            logger.info("Cart switched business", cart_id=str(self._cart.id), business_id=str(business_id))
            self._generation += 1
            self._saved_coupon_code = None
            self._set_state(NoCoupon())
        return self._changed()

    def clear(self) -> PricingSnapshot:
        self._ensure_not_checking_out()
        self._generation += 1
        self._saved_coupon_code = None
        self._cart.clear()
        self._set_state(NoCoupon())
        return self._changed()

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    async def apply_coupon(self, code) -> PricingSnapshot:
        """Look up, validate and apply ``code``.

        Rule violations end in ``Rejected`` and are returned in the
        snapshot. A ``TransientError`` propagates and leaves the coupon state
        as it was before the call. Answers that arrive after the cart moved
        on are discarded.
        """
        self._ensure_not_checking_out()
        normalized = normalize_code(code)
        business_id = self._cart.business_id
        self._generation += 1
        generation = self._generation
        self._saved_coupon_code = None

        if not normalized or not business_id:
            self._reject(normalized, CouponRejected(RejectionReason.NOT_FOUND))
            return self._changed()

        self._set_state(Validating(normalized))

        try:
            coupon = await self._catalog.lookup(normalized, str(business_id))
        except CouponRejected as exc:
            if self._is_current(generation, business_id):
                self._reject(normalized, exc)
                return self._changed()
            return self._discard(normalized)
        except (TransientError, asyncio.CancelledError) as exc:
            if self._is_current(generation, business_id):
                # Back to the last settled state; an older lookup it replaced is already stale
                self._set_state(self._settled)
                self._changed()
            logger.warning("Coupon lookup did not complete", coupon_code=normalized, error=repr(exc))
            raise

        if not self._is_current(generation, business_id):
            return self._discard(normalized)

        if coupon is None or not coupon.matches(normalized) or str(coupon.business_id) != str(business_id):
            self._reject(normalized, CouponRejected(RejectionReason.NOT_FOUND))
            return self._changed()

        subtotal = self._cart.subtotal_cents
        try:
            validate(coupon, subtotal, now=self._clock())
        except CouponRejected as exc:
            self._reject(normalized, exc, coupon=coupon)
            return self._changed()

        self._set_state(Applied(coupon=coupon, discount_cents=compute_discount_cents(coupon, subtotal)))
        logger.info(
            "Coupon applied",
            cart_id=str(self._cart.id),
            coupon_code=normalized,
            discount_cents=self._state.discount_cents,
        )
        return self._changed()

    async def resume_coupon(self) -> PricingSnapshot:
        """Re-apply the coupon code saved with a restored cart, if any."""
        if not self._saved_coupon_code:
            return self.snapshot
        return await self.apply_coupon(self._saved_coupon_code)

    def remove_coupon(self) -> PricingSnapshot:
        self._ensure_not_checking_out()
        self._generation += 1
        self._saved_coupon_code = None
        self._set_state(NoCoupon())
        return self._changed()

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    async def checkout(self) -> OrderReceipt:
        """Create an order from the cart, then clear the cart.

        Raises:
            CartStateError: the cart is empty, a coupon lookup is in flight or
                another checkout has not finished.
            TransientError, OrderCreationFailed: from the order service; the
                cart is left untouched.
        """
        self._ensure_not_checking_out()
        snapshot = self.snapshot
        if snapshot.is_empty:
            raise CartStateError(StateErrorKind.EMPTY_CART)
        if isinstance(snapshot.coupon_state, Validating):
            raise CartStateError(StateErrorKind.COUPON_PENDING)
        if snapshot.total_cents < 0:
            raise CartStateError(StateErrorKind.NEGATIVE_TOTAL)

        request = OrderRequest(
            business_id=snapshot.business_id,
            items=[
                OrderLine(
                    dish_id=line.dish_id,
                    name=line.name,
                    unit_price_cents=line.unit_price_cents,
                    quantity=line.quantity,
                )
                for line in snapshot.lines
            ],
            subtotal_cents=snapshot.subtotal_cents,
            discount_cents=snapshot.discount_cents,
            total_cents=snapshot.total_cents,
            coupon_code=snapshot.coupon_state.code if isinstance(snapshot.coupon_state, Applied) else None,
        )

        self._checking_out = True
        try:
            receipt = await self._order_creation.create_order(request)
        finally:
            self._checking_out = False

        self._generation += 1
        self._cart.check_out(receipt.order_id, snapshot.total_cents)
        self._set_state(NoCoupon())
        self._changed()
        logger.info(
            "Cart checked out",
            cart_id=str(self._cart.id),
            order_id=receipt.order_id,
            total_cents=snapshot.total_cents,
        )
        return receipt

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _ensure_not_checking_out(self) -> None:
        if self._checking_out:
            raise CartStateError(StateErrorKind.CHECKOUT_IN_PROGRESS)

    def _is_current(self, generation: int, business_id) -> bool:
        return generation == self._generation and self._cart.business_id == business_id

    def _discard(self, code: str) -> PricingSnapshot:
        logger.debug("Discarded stale coupon lookup", coupon_code=code)
        return self.snapshot

    def _reject(self, code: str, exc: CouponRejected, coupon=None) -> None:
        self._set_state(Rejected(code=code, reason=exc.reason, message=exc.message, coupon=coupon))
        logger.info("Coupon rejected", coupon_code=code, reason=exc.reason.value)

    def _set_state(self, state: CouponApplicationState) -> None:
        """Swap the coupon state, keeping the cart's applied code in step with ``Applied``."""
        self._state = state
        if not isinstance(state, Validating):
            self._settled = state
        if isinstance(state, Applied):
            if self._cart.applied_coupon_code != state.code:
                self._cart.apply_coupon(state.code)
        elif self._cart.applied_coupon_code:
            self._cart.remove_coupon()

    def _revalidate(self) -> None:
        # An applied coupon follows the subtotal: the discount is re-priced,
        # or the coupon falls back to Rejected when the minimum is no longer met
        if not isinstance(self._state, Applied):
            return

        coupon = self._state.coupon
        subtotal = self._cart.subtotal_cents
        if meets_minimum(coupon, subtotal):
            discount = compute_discount_cents(coupon, subtotal)
            if discount != self._state.discount_cents:
                self._set_state(Applied(coupon=coupon, discount_cents=discount))
        else:
            self._reject(self._state.code, below_minimum(coupon), coupon=coupon)

    def _changed(self) -> PricingSnapshot:
        self._revalidate()
        if self._store is not None:
            if self._cart.items or self._cart.business_id:
                self._store.save(self._cart.to_record())
            else:
                self._store.delete()
        current_domain.repository_for(Cart).add(self._cart)
        return self.snapshot
