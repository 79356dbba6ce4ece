"""Shared BDD fixtures and step definitions for checkout."""

import asyncio

import pytest
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
from checkout.coupon.state import Applied, NoCoupon, Rejected
from checkout.menu.dish import Dish
from checkout.shared.errors import TransientError, TransientKind
from pytest_bdd import given, parsers, then, when

# Event names a Then step may ask about
_CART_EVENT_TYPES = {
    cls.__name__
    for cls in (
        CartItemAdded,
        CartQuantityUpdated,
        CartItemRemoved,
        CartBusinessSwitched,
        CartCleared,
        CartCouponApplied,
        CartCouponRemoved,
        CartCheckedOut,
    )
}


@pytest.fixture()
def outcome():
    """Container for the last snapshot, receipt or captured error."""
    return {"snapshot": None, "receipt": None, "exc": None, "events_before": 0}


def pytest_bdd_before_step(request, feature, scenario, step, step_func):
    """Remember how many cart events were stored before each When step."""
    if step.type != "when":
        return
    controller = request.getfixturevalue("controller")
    read = request.getfixturevalue("stored_event_types")
    request.getfixturevalue("outcome")["events_before"] = len(read(controller.cart))


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a cart for business "{business_id}"'))
def cart_for_business(controller, business_id):
    controller.set_business_id(business_id)


@given(parsers.cfparse("the cart holds {quantity:d} of a dish priced {price:d} cents"))
def cart_holds_dish(controller, quantity, price):
    dish = Dish(dish_id="dish-001", name="House Special", unit_price_cents=price)
    for _ in range(quantity):
        controller.add_item(dish)


@given(
    parsers.cfparse(
        'the business offers a {percent:d} percent coupon "{code}" capped at {cap:d} cents'
    )
)
def percentage_coupon_with_cap(controller, coupon_catalog, percent, code, cap):
    coupon_catalog.add(
        {
            "code": code,
            "business_id": str(controller.cart.business_id),
            "discount_type": "percentage",
            "discount_value": percent,
            "max_discount_cents": cap,
        }
    )


@given(parsers.cfparse('the business offers a {percent:d} percent coupon "{code}" above {minimum:d} cents'))
def percentage_coupon_with_minimum(controller, coupon_catalog, percent, code, minimum):
    coupon_catalog.add(
        {
            "code": code,
            "business_id": str(controller.cart.business_id),
            "discount_type": "percentage",
            "discount_value": percent,
            "min_order_value_cents": minimum,
        }
    )


@given(parsers.cfparse('the business offers a fixed coupon "{code}" worth {value:d} cents above {minimum:d} cents'))
def fixed_coupon_with_minimum(controller, coupon_catalog, code, value, minimum):
    coupon_catalog.add(
        {
            "code": code,
            "business_id": str(controller.cart.business_id),
            "discount_type": "fixed",
            "discount_value": value,
            "min_order_value_cents": minimum,
        }
    )


@given(parsers.cfparse('the business offers a fixed coupon "{code}" worth {value:d} cents'))
def fixed_coupon(controller, coupon_catalog, code, value):
    coupon_catalog.add(
        {
            "code": code,
            "business_id": str(controller.cart.business_id),
            "discount_type": "fixed",
            "discount_value": value,
        }
    )


@given(parsers.cfparse('the coupon "{code}" is applied'))
def coupon_already_applied(controller, code):
    asyncio.run(controller.apply_coupon(code))


@given("the coupon catalog is unreachable")
def catalog_unreachable(coupon_catalog):
    coupon_catalog.configure(transient_failure=TransientKind.NETWORK_UNAVAILABLE)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the coupon "{code}" is applied'))
def apply_coupon(controller, outcome, code):
    try:
        outcome["snapshot"] = asyncio.run(controller.apply_coupon(code))
    except TransientError as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the coupon is applied")
def coupon_is_applied(controller):
    assert isinstance(controller.coupon_state, Applied)


@then(parsers.cfparse('the coupon is rejected as "{reason}"'))
def coupon_is_rejected(controller, reason):
    state = controller.coupon_state
    assert isinstance(state, Rejected), f"Expected a rejected coupon, got {state!r}"
    assert state.reason.value == reason


@then("no coupon is applied")
def no_coupon(controller):
    assert isinstance(controller.coupon_state, NoCoupon)
    assert controller.cart.applied_coupon_code is None


@then(parsers.cfparse("the subtotal is {cents:d} cents"))
def subtotal_is(controller, cents):
    assert controller.snapshot.subtotal_cents == cents


@then(parsers.cfparse("the discount is {cents:d} cents"))
def discount_is(controller, cents):
    assert controller.snapshot.discount_cents == cents


@then(parsers.cfparse("the total is {cents:d} cents"))
def total_is(controller, cents):
    assert controller.snapshot.total_cents == cents


@then("the cart is empty")
def cart_is_empty(controller):
    assert controller.snapshot.is_empty


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(controller, outcome, stored_event_types, event_type):
    assert event_type in _CART_EVENT_TYPES, f"Unknown cart event {event_type}"
    events = stored_event_types(controller.cart)[outcome["events_before"] :]
    assert event_type in events, f"No {event_type} event found. Events: {events}"
