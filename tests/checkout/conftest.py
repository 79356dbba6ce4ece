from datetime import UTC, datetime

import pytest
from checkout.cart.cart import Cart
from checkout.cart.controller import CartController
from checkout.cart.persistence import InMemoryCartStore
from checkout.coupon.catalog.fake_adapter import FakeCouponCatalog
from checkout.order.fake_adapter import FakeOrderCreation
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _reset_adapters():
    """Drop adapter singletons a test may have created."""
    yield

    from checkout.coupon.catalog import reset_coupon_catalog
    from checkout.order import reset_order_creation

    reset_coupon_catalog()
    reset_order_creation()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
NOW = datetime(2026, 6, 1, 12, tzinfo=UTC)


@pytest.fixture()
def coupon_catalog():
    return FakeCouponCatalog(
        [
            {
                "code": "FEST15",
                "businessId": "biz-001",
                "discountType": "percentage",
                "discountValue": 15,
                "maxDiscountCents": 200,
            },
            {
                "code": "SAVE10",
                "businessId": "biz-001",
                "discountType": "percentage",
                "discountValue": 10,
                "minOrderValueCents": 1000,
            },
            {
                "code": "FLAT300",
                "businessId": "biz-001",
                "discountType": "fixed",
                "discountValue": 300,
            },
            {
                "code": "PIZZA50",
                "businessId": "biz-002",
                "discountType": "fixed",
                "discountValue": 5000,
            },
        ]
    )


@pytest.fixture()
def order_creation():
    return FakeOrderCreation()


@pytest.fixture()
def cart_store():
    return InMemoryCartStore()


@pytest.fixture()
def controller(coupon_catalog, order_creation, cart_store):
    return CartController(
        coupon_catalog=coupon_catalog,
        order_creation=order_creation,
        store=cart_store,
        clock=lambda: NOW,
    )


@pytest.fixture()
def stored_event_types():
    """Names of the events stored for a cart, oldest first."""

    def _read(cart):
        stream = f"{Cart.meta_.stream_category}-{cart.id}"
        messages = current_domain.event_store.store.read(stream)
        return [m.metadata.headers.type.split(".")[-2] for m in messages]

    return _read
