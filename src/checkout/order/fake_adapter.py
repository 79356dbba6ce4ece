"""Configurable fake order service for development and testing.

Accepts every order by default. It can be configured to refuse orders or to
fail as if the network were down.
"""

from uuid import uuid4

from checkout.order.port import OrderCreation, OrderReceipt
from checkout.order.schemas import OrderRequest
from checkout.shared.errors import OrderCreationFailed, TransientError, TransientKind


class FakeOrderCreation(OrderCreation):
    """Configurable fake order creation adapter."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Business is not accepting orders"
        self.transient_failure: TransientKind | None = None
        self.calls: list[OrderRequest] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Business is not accepting orders",
        transient_failure: TransientKind | None = None,
    ) -> None:
        """Configure adapter behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.transient_failure = transient_failure

    async def create_order(self, request: OrderRequest) -> OrderReceipt:
        self.calls.append(request)

        if self.transient_failure is not None:
            raise TransientError(self.transient_failure, "order service unavailable")
        if not self.should_succeed:
            raise OrderCreationFailed(self.failure_reason)

        return OrderReceipt(order_id=f"ord_{uuid4().hex[:12]}", total_cents=request.total_cents)
