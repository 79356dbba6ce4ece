"""Order creation port (abstract interface).

Checkout hands the priced cart to the order service through this port. The
cart is cleared only after the adapter reports success.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from checkout.order.schemas import OrderRequest


@dataclass(frozen=True)
class OrderReceipt:
    """Result of a successful order creation."""

    order_id: str
    total_cents: int


class OrderCreation(ABC):
    """Abstract order creation interface."""

    @abstractmethod
    async def create_order(self, request: OrderRequest) -> OrderReceipt:
        """Create an order from ``request``.

        Raises:
            TransientError: the order service could not be reached.
            OrderCreationFailed: the order service refused the order.
        """
        ...
