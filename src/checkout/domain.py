"""Checkout bounded context: cart pricing and coupon application.

Holds the customer's cart for one business at a time, prices it in integer
cents, and applies at most one coupon validated against the business's
coupon catalog.
"""

from protean.domain import Domain

from checkout.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

checkout = Domain(name="checkout")
