"""Tests for catalog-based order pricing."""

import pytest

from orderdesk.errors import (
    EmptyOrderError,
    InvalidLineItemError,
    InvalidPriceError,
    ProductNotFoundError,
)
from orderdesk.models import LineItem, Product
from orderdesk.pricing import resolve_prices, to_minor_units


class StaticCatalog:
    """Catalog served by another service, without our write-side checks."""

    def __init__(self, *products: Product):
        self.products = list(products)

    def find_by_ids(self, product_ids):
        wanted = set(product_ids)
        return [p for p in self.products if p.product_id in wanted]


class TestResolvePrices:
    def test_major_units_converted_to_minor(self, product_store):
        priced = resolve_prices(product_store, [LineItem("PROD001", 2)])

        assert priced.amount == 100000
        assert len(priced.lines) == 1
        assert priced.lines[0].price == 50000
        assert priced.lines[0].quantity == 2

    def test_amount_is_sum_of_line_totals(self, product_store):
        items = [LineItem("PROD001", 1), LineItem("PROD002", 3), LineItem("PROD003", 4)]
        priced = resolve_prices(product_store, items)

        assert [line.price for line in priced.lines] == [50000, 4999, 1050]
        assert priced.amount == sum(line.price * line.quantity for line in priced.lines)
        assert priced.amount == 50000 + 14997 + 4200

    def test_repeated_product_keeps_separate_lines(self, product_store):
        priced = resolve_prices(product_store, [LineItem("PROD002", 1), LineItem("PROD002", 2)])

        assert len(priced.lines) == 2
        assert priced.amount == 3 * 4999

    def test_decimal_prices_do_not_drift(self, temp_dir):
        from orderdesk.catalog_store import ProductStore

        store = ProductStore(temp_dir)
        store.add_product("CHEAP", "Sticker", "0.1")
        priced = resolve_prices(store, [LineItem("CHEAP", 3)])

        # 0.1 * 3 in binary floating point is 0.30000000000000004
        assert priced.amount == 30

    def test_unknown_product_fails_whole_order(self, product_store):
        with pytest.raises(ProductNotFoundError) as exc_info:
            resolve_prices(product_store, [LineItem("PROD001", 1), LineItem("NOPE", 1)])

        assert exc_info.value.product_id == "NOPE"

    def test_empty_order_rejected(self, product_store):
        with pytest.raises(EmptyOrderError):
            resolve_prices(product_store, [])

    def test_zero_quantity_rejected(self, product_store):
        with pytest.raises(InvalidLineItemError):
            resolve_prices(product_store, [LineItem("PROD001", 0)])

    def test_catalog_looked_up_once_per_distinct_product(self, product_store):
        calls = []

        class CountingCatalog:
            def find_by_ids(self, product_ids):
                ids = list(product_ids)
                calls.append(ids)
                return product_store.find_by_ids(ids)

        resolve_prices(
            CountingCatalog(),
            [LineItem("PROD001", 1), LineItem("PROD002", 1), LineItem("PROD001", 2)],
        )

        assert calls == [["PROD001", "PROD002"]]

    def test_sub_minor_unit_catalog_price_rejected(self):
        catalog = StaticCatalog(Product("P", "Thing", "0.125"))

        with pytest.raises(InvalidPriceError) as exc_info:
            resolve_prices(catalog, [LineItem("P", 2)])

        assert exc_info.value.product_id == "P"

    def test_unparseable_catalog_price_rejected(self):
        catalog = StaticCatalog(Product("P", "Thing", "n/a"))

        with pytest.raises(InvalidPriceError):
            resolve_prices(catalog, [LineItem("P", 1)])

    @pytest.mark.parametrize(
        "prices, quantities",
        [
            (["0.13", "0.12"], [2, 3]),
            (["49.99", "10.5", "0.01"], [7, 3, 99]),
            (["1999.95", "0"], [1, 4]),
        ],
    )
    def test_amount_always_equals_line_totals(self, prices, quantities):
        products = [Product(f"P{i}", "Thing", price) for i, price in enumerate(prices)]
        items = [LineItem(f"P{i}", qty) for i, qty in enumerate(quantities)]

        priced = resolve_prices(StaticCatalog(*products), items)

        assert priced.amount == sum(line.price * line.quantity for line in priced.lines)


class TestToMinorUnits:
    @pytest.mark.parametrize(
        "price, expected",
        [("500", 50000), ("49.99", 4999), ("10.5", 1050), ("0.10", 10), ("12.300", 1230)],
    )
    def test_whole_minor_units(self, price, expected):
        assert to_minor_units("P", price) == expected

    @pytest.mark.parametrize("price", ["0.125", "-1", "NaN", "abc"])
    def test_rejected(self, price):
        with pytest.raises(InvalidPriceError):
            to_minor_units("P", price)
