"""Menu dishes as seen by the cart."""

from protean.fields import Boolean, Identifier, Integer, String

from checkout.domain import checkout


@checkout.value_object
class Dish:
    """A dish as published on a business's menu.

    Prices are in cents. ``business_id`` is optional; when present, the cart
    refuses to mix the dish into another business's cart.
    """

    dish_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    is_available = Boolean(default=True)
    business_id = Identifier()
