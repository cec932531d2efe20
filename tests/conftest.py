"""Pytest fixtures for orderdesk tests."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from orderdesk.catalog_store import ProductStore
from orderdesk.config import Settings
from orderdesk.errors import PaymentGatewayError
from orderdesk.models import (
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    ShippingAddress,
    format_timestamp,
)
from orderdesk.order_store import OrderStore

SIGNING_SECRET = "test_signing_secret"
NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


class FakeGateway:
    """Records create_order calls and hands back sequential gateway orders."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[dict] = []

    def create_order(self, amount: int, currency: str, receipt: str) -> dict:
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt})
        if self.fail:
            raise PaymentGatewayError("request timed out")
        return {
            "id": f"order_gw{len(self.calls):04d}",
            "entity": "order",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }


class FixedClock:
    """A settable clock for time-windowed rules."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(temp_dir):
    return Settings(
        data_dir=temp_dir,
        gateway_key_id="rzp_test_key",
        gateway_secret=SIGNING_SECRET,
        currency_code="INR",
    )


@pytest.fixture
def product_store(temp_dir):
    """Catalog seeded with a few products (prices in rupees)."""
    store = ProductStore(temp_dir)
    store.add_product("PROD001", "Desk lamp", "500", category="Lighting")
    store.add_product("PROD002", "Notebook", "49.99", category="Stationery")
    store.add_product("PROD003", "Pen", "10.5", category="Stationery")
    return store


@pytest.fixture
def order_store(temp_dir):
    return OrderStore(temp_dir)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def shipping_address():
    return ShippingAddress(
        first_name="Asha",
        last_name="Rao",
        email="asha@example.com",
        phone="9999999999",
        address="12 MG Road",
        city="Bengaluru",
        state="KA",
        pincode="560001",
        country="India",
    )


@pytest.fixture
def make_order(order_store, shipping_address):
    """Insert an order directly into the store in a chosen state."""
    counter = {"n": 0}

    def _make(
        user_id: str = "user-1",
        status: OrderStatus = OrderStatus.PROCESSING,
        method: PaymentMethod = PaymentMethod.COD,
        is_paid: bool = False,
        delivered_at: datetime | None = None,
        gateway_order_id: str | None = None,
    ) -> Order:
        counter["n"] += 1
        order = Order.create(
            user_id=user_id,
            products=[OrderLine(product_id="PROD001", quantity=1, price=50000)],
            amount=50000,
            shipping_address=shipping_address,
            payment_method=method,
            receipt_id=f"receipt_test{counter['n']:04d}",
            order_status=status,
            gateway_order={"id": gateway_order_id} if gateway_order_id else None,
        )
        order.is_paid = is_paid
        if delivered_at is not None:
            order.delivered_at = format_timestamp(delivered_at)
        return order_store.add_order(order)

    return _make
