"""Authoritative order pricing from catalog prices."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Protocol

from .errors import (
    EmptyOrderError,
    InvalidLineItemError,
    InvalidPriceError,
    ProductNotFoundError,
)
from .models import LineItem, OrderLine, Product

MINOR_UNITS_PER_MAJOR = 100


class Catalog(Protocol):
    def find_by_ids(self, product_ids: Iterable[str]) -> list[Product]: ...


@dataclass
class PricedOrder:
    lines: list[OrderLine]
    amount: int  # minor units


def to_minor_units(product_id: str, price: str) -> int:
    """
    Convert a major-unit catalog price to whole minor units.

    Raises:
        InvalidPriceError: If the price isn't a non-negative number or has
            a fraction of a minor unit (e.g. "0.125").
    """
    try:
        parsed = Decimal(str(price))
    except InvalidOperation:
        raise InvalidPriceError(product_id, str(price), "not a number")
    if not parsed.is_finite() or parsed < 0:
        raise InvalidPriceError(product_id, str(price), "must be non-negative")

    minor = parsed * MINOR_UNITS_PER_MAJOR
    if minor != minor.to_integral_value():
        raise InvalidPriceError(product_id, str(price), "finer than one minor unit")
    return int(minor)


def resolve_prices(catalog: Catalog, line_items: list[LineItem]) -> PricedOrder:
    """
    Price line items from the catalog, ignoring anything the client sent.

    Each distinct product is looked up once. Unit prices convert exactly to
    minor units, so the amount is always the sum of line totals.

    Raises:
        EmptyOrderError: If there are no line items.
        InvalidLineItemError: If a quantity is below one.
        ProductNotFoundError: If any product id has no catalog entry.
        InvalidPriceError: If a catalog price isn't whole minor units.
    """
    if not line_items:
        raise EmptyOrderError()

    for item in line_items:
        if item.quantity < 1:
            raise InvalidLineItemError(item.product_id, "quantity must be at least 1")

    product_ids = list(dict.fromkeys(item.product_id for item in line_items))
    prices = {
        p.product_id: to_minor_units(p.product_id, p.price)
        for p in catalog.find_by_ids(product_ids)
    }

    lines: list[OrderLine] = []
    for item in line_items:
        if item.product_id not in prices:
            raise ProductNotFoundError(item.product_id)
        lines.append(
            OrderLine(
                product_id=item.product_id,
                quantity=item.quantity,
                price=prices[item.product_id],
            )
        )

    return PricedOrder(lines=lines, amount=sum(line.total for line in lines))
