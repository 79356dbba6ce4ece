"""The dishes a customer is about to order from one business.

A cart belongs to at most one business at a time. Switching business empties
it, and items are unique per dish: adding the same dish again bumps its
quantity. Quantities are always at least one; setting a quantity to zero
removes the item instead.

The aggregate holds items and the applied coupon code only. Prices and
discounts are derived by the pricing engine and never stored on the cart.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from checkout.cart.events import (
    CartBusinessSwitched,
    CartCheckedOut,
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from checkout.cart.schemas import CartLineRecord, CartRecord
from checkout.domain import checkout
from checkout.shared.errors import CartStateError, StateErrorKind
from checkout.shared.money import line_total


@checkout.entity(part_of="Cart")
class CartItem:
    """A dish in the cart, priced as it was when first added."""

    dish_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)

    @property
    def line_total_cents(self) -> int:
        return line_total(self.unit_price_cents, self.quantity)


@checkout.aggregate
class Cart:
    business_id = Identifier()  # Empty carts may not belong to a business yet
    items = HasMany(CartItem)
    applied_coupon_code = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def non_empty_cart_must_belong_to_a_business(self):
        if self.items and not self.business_id:
            raise ValidationError({"business_id": ["A cart with items must belong to a business"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, business_id=None):
        now = datetime.now(UTC)
        return cls(business_id=business_id, created_at=now, updated_at=now)

    @classmethod
    def from_record(cls, record: CartRecord):
        """Rebuild a cart from its persisted form.

        The coupon code is not restored here: a saved coupon must be looked
        up and validated again before it discounts anything.
        """
        cart = cls.create(business_id=record.business_id)
        for line in record.items:
            cart.add_items(
                CartItem(
                    dish_id=line.dish_id,
                    name=line.name,
                    unit_price_cents=line.unit_price_cents,
                    quantity=line.quantity,
                )
            )
        return cart

    def to_record(self) -> CartRecord:
        return CartRecord(
            business_id=str(self.business_id) if self.business_id else None,
            items=[
                CartLineRecord(
                    dish_id=str(item.dish_id),
                    name=item.name,
                    unit_price_cents=item.unit_price_cents,
                    quantity=item.quantity,
                )
                for item in self.items
            ],
            applied_coupon_code=self.applied_coupon_code,
        )

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def find_item(self, dish_id):
        return next((i for i in self.items if str(i.dish_id) == str(dish_id)), None)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal_cents(self) -> int:
        return sum(item.line_total_cents for item in self.items)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, dish):
        """Add one unit of ``dish``."""
        if not dish.is_available:
            raise ValidationError({"dish_id": [f"Dish {dish.name} is not available"]})
        if not self.business_id:
            raise ValidationError({"business_id": ["Select a business before adding items"]})
        if dish.business_id and str(dish.business_id) != str(self.business_id):
            raise CartStateError(StateErrorKind.CROSS_BUSINESS_MIXING)

        existing = self.find_item(dish.dish_id)
        if existing:
            existing.quantity += 1
            quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    dish_id=dish.dish_id,
                    name=dish.name,
                    unit_price_cents=dish.unit_price_cents,
                    quantity=1,
                )
            )
            quantity = 1

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                dish_id=str(dish.dish_id),
                quantity=quantity,
            )
        )

    def update_quantity(self, dish_id, quantity):
        """Set the quantity of a dish already in the cart; zero or less removes it."""
        if quantity <= 0:
            self.remove_item(dish_id)
            return

        item = self.find_item(dish_id)
        if item is None or item.quantity == quantity:
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                dish_id=str(dish_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, dish_id):
        """Remove a dish from the cart. Unknown dishes are ignored."""
        item = self.find_item(dish_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), dish_id=str(dish_id)))

    def _drop_items(self) -> int:
        dropped = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        return dropped

    # -------------------------------------------------------------------
    # Business scoping
    # -------------------------------------------------------------------
    def switch_business(self, business_id) -> bool:
        """Scope the cart to ``business_id``.

        Items and coupon of another business are dropped first. Returns
        False when the cart already belongs to ``business_id``.
        """
        if not business_id:
            raise ValidationError({"business_id": ["Business is required"]})
        if self.business_id and str(self.business_id) == str(business_id):
            return False

        previous_business_id = self.business_id
        dropped = self._drop_items()
        if self.applied_coupon_code:
            self.remove_coupon()
        self.business_id = business_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartBusinessSwitched(
                cart_id=str(self.id),
                previous_business_id=str(previous_business_id) if previous_business_id else None,
                business_id=str(business_id),
                items_dropped=dropped,
            )
        )
        return True

    def clear(self):
        """Empty the cart and detach it from its business."""
        self._drop_items()
        if self.applied_coupon_code:
            self.remove_coupon()
        self.business_id = None
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code):
        """Record ``coupon_code`` as the cart's applied coupon (replacing any other)."""
        if not coupon_code:
            raise ValidationError({"coupon_code": ["Coupon code is required"]})

        self.applied_coupon_code = coupon_code
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCouponApplied(cart_id=str(self.id), coupon_code=coupon_code))

    def remove_coupon(self):
        if not self.applied_coupon_code:
            return

        coupon_code = self.applied_coupon_code
        self.applied_coupon_code = None
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=coupon_code))

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def check_out(self, order_id, total_cents):
        """Record that an order was created from this cart, then empty it."""
        if not self.items:
            raise CartStateError(StateErrorKind.EMPTY_CART)

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                order_id=str(order_id),
                business_id=str(self.business_id),
                total_cents=total_cents,
            )
        )
        self.clear()
