"""Tests for populated order reads."""

import pytest

from orderdesk.errors import ForbiddenError, OrderNotFoundError
from orderdesk.models import Identity, OrderLine
from orderdesk.views import get_visible_order, populate_orders


class TestPopulateOrders:
    def test_lines_carry_product_details(self, order_store, product_store, make_order):
        order = make_order()

        [view] = populate_orders([order], product_store)

        line = view["products"][0]
        assert line["price"] == 50000
        assert line["product_details"]["product_name"] == "Desk lamp"
        assert line["product_details"]["price"] == "500"
        assert view["id"] == order.id

    def test_keeps_stored_price_after_catalog_change(self, temp_dir, make_order):
        from orderdesk.catalog_store import ProductStore

        catalog = ProductStore(temp_dir)
        catalog.add_product("PROD001", "Desk lamp", "650")
        order = make_order()

        [view] = populate_orders([order], catalog)

        assert view["products"][0]["price"] == 50000
        assert view["amount"] == 50000

    def test_missing_product_line_dropped(self, product_store, make_order):
        order = make_order()
        order.products.append(OrderLine(product_id="GONE", quantity=1, price=100))

        [view] = populate_orders([order], product_store)

        assert [line["product_id"] for line in view["products"]] == ["PROD001"]


class TestGetVisibleOrder:
    def test_owner(self, order_store, make_order):
        order = make_order(user_id="user-1")
        assert get_visible_order(order_store, order.id, Identity("user-1")).id == order.id

    def test_admin(self, order_store, make_order):
        order = make_order(user_id="user-1")
        assert get_visible_order(order_store, order.id, Identity("boss", role="admin")).id == order.id

    def test_stranger(self, order_store, make_order):
        order = make_order(user_id="user-1")
        with pytest.raises(ForbiddenError):
            get_visible_order(order_store, order.id, Identity("user-2"))

    def test_missing(self, order_store):
        with pytest.raises(OrderNotFoundError):
            get_visible_order(order_store, "nope", Identity("user-1"))
