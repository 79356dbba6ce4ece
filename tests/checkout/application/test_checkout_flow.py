"""Tests for checking out a cart through the order creation collaborator."""

import asyncio

import pytest
from checkout.cart.controller import CartController
from checkout.coupon.state import NoCoupon
from checkout.menu.dish import Dish
from checkout.order.fake_adapter import FakeOrderCreation
from checkout.order.port import OrderReceipt
from checkout.shared.errors import (
    CartStateError,
    OrderCreationFailed,
    StateErrorKind,
    TransientError,
    TransientKind,
)

DOSA = Dish(dish_id="dish-001", name="Masala Dosa", unit_price_cents=1000)
CHAI = Dish(dish_id="dish-002", name="Chai", unit_price_cents=100)


class _YieldingOrderCreation(FakeOrderCreation):
    """Gives the event loop a turn before answering, like a network call."""

    async def create_order(self, request):
        await asyncio.sleep(0)
        return await super().create_order(request)


def _fill(controller, quantity=2):
    controller.set_business_id("biz-001")
    for _ in range(quantity):
        controller.add_item(DOSA)
    return controller


class TestCheckout:
    def test_creates_order_and_clears_cart(self, controller, order_creation):
        _fill(controller)
        asyncio.run(controller.apply_coupon("FEST15"))

        receipt = asyncio.run(controller.checkout())

        assert isinstance(receipt, OrderReceipt)
        assert receipt.order_id.startswith("ord_")
        assert receipt.total_cents == 1800
        assert controller.snapshot.is_empty
        assert isinstance(controller.coupon_state, NoCoupon)

    def test_order_request_carries_priced_cart(self, controller, order_creation):
        _fill(controller)
        asyncio.run(controller.apply_coupon("FEST15"))
        asyncio.run(controller.checkout())

        request = order_creation.calls[0]
        assert request.business_id == "biz-001"
        assert request.subtotal_cents == 2000
        assert request.discount_cents == 200
        assert request.total_cents == 1800
        assert request.coupon_code == "FEST15"
        assert [(line.dish_id, line.quantity) for line in request.items] == [("dish-001", 2)]

    def test_rejected_coupon_is_not_sent(self, controller, order_creation):
        controller.set_business_id("biz-001")
        controller.add_item(Dish(dish_id="dish-002", name="Chai", unit_price_cents=100))
        asyncio.run(controller.apply_coupon("SAVE10"))

        asyncio.run(controller.checkout())

        assert order_creation.calls[0].coupon_code is None
        assert order_creation.calls[0].discount_cents == 0

    def test_checkout_event_is_stored(self, controller, stored_event_types):
        _fill(controller)
        asyncio.run(controller.checkout())

        assert stored_event_types(controller.cart)[-2:] == ["CartCheckedOut", "CartCleared"]
        assert controller.cart._events == []

    def test_saved_cart_is_deleted(self, controller, cart_store):
        _fill(controller)
        asyncio.run(controller.checkout())

        assert cart_store.load() is None


class TestCheckoutGuards:
    def test_empty_cart(self, controller, order_creation):
        with pytest.raises(CartStateError) as exc_info:
            asyncio.run(controller.checkout())

        assert exc_info.value.kind == StateErrorKind.EMPTY_CART
        assert exc_info.value.message == "Cart is empty"
        assert order_creation.calls == []

    def test_pending_coupon_lookup(self, controller, coupon_catalog):
        _fill(controller)

        async def scenario():
            gate = coupon_catalog.hold()
            task = asyncio.create_task(controller.apply_coupon("FEST15"))
            await asyncio.sleep(0)
            try:
                with pytest.raises(CartStateError) as exc_info:
                    await controller.checkout()
            finally:
                gate.set()
                await task
            return exc_info.value

        exc = asyncio.run(scenario())
        assert exc.kind == StateErrorKind.COUPON_PENDING


class TestOrderFailures:
    def test_refused_order_keeps_cart(self, controller, order_creation):
        _fill(controller)
        asyncio.run(controller.apply_coupon("FEST15"))
        order_creation.configure(should_succeed=False, failure_reason="Kitchen closed")

        with pytest.raises(OrderCreationFailed) as exc_info:
            asyncio.run(controller.checkout())

        assert exc_info.value.reason == "Kitchen closed"
        assert controller.snapshot.item_count == 2
        assert controller.snapshot.discount_cents == 200

    def test_network_failure_keeps_cart(self, controller, order_creation):
        _fill(controller)
        order_creation.configure(transient_failure=TransientKind.NETWORK_UNAVAILABLE)

        with pytest.raises(TransientError):
            asyncio.run(controller.checkout())

        assert controller.snapshot.item_count == 2

    def test_retry_succeeds(self, controller, order_creation):
        _fill(controller)
        order_creation.configure(transient_failure=TransientKind.SERVER_ERROR)
        with pytest.raises(TransientError):
            asyncio.run(controller.checkout())

        order_creation.configure()
        receipt = asyncio.run(controller.checkout())

        assert receipt.total_cents == 2000
        assert len(order_creation.calls) == 2


class TestCartFrozenDuringCheckout:
    @pytest.fixture()
    def slow_orders(self):
        return _YieldingOrderCreation()

    @pytest.fixture()
    def frozen(self, coupon_catalog, slow_orders, cart_store):
        controller = CartController(
            coupon_catalog=coupon_catalog,
            order_creation=slow_orders,
            store=cart_store,
        )
        return _fill(controller)

    def test_second_checkout_is_refused(self, frozen, slow_orders):
        async def scenario():
            return await asyncio.gather(frozen.checkout(), frozen.checkout(), return_exceptions=True)

        first, second = asyncio.run(scenario())

        assert isinstance(first, OrderReceipt)
        assert isinstance(second, CartStateError)
        assert second.kind == StateErrorKind.CHECKOUT_IN_PROGRESS
        assert len(slow_orders.calls) == 1

    def test_items_cannot_be_added_while_ordering(self, frozen, slow_orders):
        async def scenario():
            task = asyncio.create_task(frozen.checkout())
            await asyncio.sleep(0)
            with pytest.raises(CartStateError) as exc_info:
                frozen.add_item(CHAI)
            await task
            return exc_info.value

        exc = asyncio.run(scenario())

        assert exc.kind == StateErrorKind.CHECKOUT_IN_PROGRESS
        assert [(line.dish_id, line.quantity) for line in slow_orders.calls[0].items] == [("dish-001", 2)]
        assert frozen.snapshot.is_empty

    def test_coupon_cannot_change_while_ordering(self, frozen):
        async def scenario():
            task = asyncio.create_task(frozen.checkout())
            await asyncio.sleep(0)
            try:
                with pytest.raises(CartStateError):
                    await frozen.apply_coupon("FEST15")
                with pytest.raises(CartStateError):
                    frozen.clear()
            finally:
                await task

        asyncio.run(scenario())

    def test_cart_unfreezes_after_failed_order(self, frozen, slow_orders):
        slow_orders.configure(should_succeed=False)
        with pytest.raises(OrderCreationFailed):
            asyncio.run(frozen.checkout())

        assert frozen.add_item(CHAI).item_count == 3
