"""Read-side order lookups with catalog details filled in."""

from typing import Any

from .errors import ForbiddenError
from .models import Identity, Order
from .order_store import OrderStore
from .pricing import Catalog


def populate_orders(orders: list[Order], catalog: Catalog) -> list[dict[str, Any]]:
    """
    Render orders with product details resolved from the catalog.

    Line prices stay as stored at checkout. Lines whose product has left the
    catalog are omitted from the rendered view.
    """
    product_ids = {line.product_id for order in orders for line in order.products}
    products = {p.product_id: p for p in catalog.find_by_ids(product_ids)}

    result = []
    for order in orders:
        data = order.to_dict()
        data["products"] = [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price": line.price,
                "product_details": products[line.product_id].summary(),
            }
            for line in order.products
            if line.product_id in products
        ]
        result.append(data)
    return result


def get_visible_order(orders: OrderStore, order_id: str, identity: Identity) -> Order:
    """
    Fetch an order the caller is allowed to see (its owner or an admin).

    Raises:
        OrderNotFoundError: If order doesn't exist.
        ForbiddenError: If the caller is neither owner nor admin.
    """
    order = orders.get_order(order_id)
    if not identity.is_admin and order.user_id != identity.user_id:
        raise ForbiddenError("Not authorized to view this order")
    return order
