"""Order creation adapter factory.

Provides get_order_creation() / set_order_creation() to swap implementations.
The adapter is chosen by the ORDER_CREATION_ADAPTER environment variable
(only "fake" ships with the domain).
"""

import os

from checkout.order.port import OrderCreation

_current_adapter: OrderCreation | None = None


def get_order_creation() -> OrderCreation:
    """Return the configured order creation adapter. Defaults to FakeOrderCreation."""
    global _current_adapter
    if _current_adapter is None:
        adapter = os.environ.get("ORDER_CREATION_ADAPTER", "fake")
        if adapter == "fake":
            from checkout.order.fake_adapter import FakeOrderCreation

            _current_adapter = FakeOrderCreation()
        else:
            raise ValueError(f"Unknown order creation adapter: {adapter}")
    return _current_adapter


def set_order_creation(adapter: OrderCreation) -> None:
    """Override the active order creation adapter."""
    global _current_adapter
    _current_adapter = adapter


def reset_order_creation() -> None:
    """Reset to the configured default."""
    global _current_adapter
    _current_adapter = None
