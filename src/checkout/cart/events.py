"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="Cart")
class CartItemAdded:
    """A dish was added to the cart, or its quantity went up by one."""

    __version__ = 1

    cart_id = Identifier(required=True)
    dish_id = Identifier(required=True)
    quantity = Integer(required=True)


@checkout.event(part_of="Cart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    dish_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@checkout.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    dish_id = Identifier(required=True)


@checkout.event(part_of="Cart")
class CartBusinessSwitched:
    """The cart moved to another business, dropping whatever it held."""

    __version__ = 1

    cart_id = Identifier(required=True)
    previous_business_id = Identifier()
    business_id = Identifier(required=True)
    items_dropped = Integer(default=0)


@checkout.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)


@checkout.event(part_of="Cart")
class CartCouponApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)


@checkout.event(part_of="Cart")
class CartCouponRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)


@checkout.event(part_of="Cart")
class CartCheckedOut:
    """The cart's contents were handed to order creation."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    business_id = Identifier(required=True)
    total_cents = Integer(required=True)
