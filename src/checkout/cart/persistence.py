"""Cart storage port and the in-memory adapter.

Clients keep the cart on the device between sessions. The controller saves
a ``CartRecord`` after every mutation and deletes it once the cart is empty
and detached from any business.
"""

from abc import ABC, abstractmethod

from checkout.cart.schemas import CartRecord


class CartStore(ABC):
    """Abstract local cart storage."""

    @abstractmethod
    def load(self) -> CartRecord | None:
        """Return the saved cart, or None if nothing is stored."""
        ...

    @abstractmethod
    def save(self, record: CartRecord) -> None: ...

    @abstractmethod
    def delete(self) -> None: ...


class InMemoryCartStore(CartStore):
    """Keeps the record as JSON, the way a key-value device store would."""

    def __init__(self) -> None:
        self.data: str | None = None
        self.writes = 0

    def load(self) -> CartRecord | None:
        if self.data is None:
            return None
        return CartRecord.model_validate_json(self.data)

    def save(self, record: CartRecord) -> None:
        self.data = record.model_dump_json()
        self.writes += 1

    def delete(self) -> None:
        self.data = None
