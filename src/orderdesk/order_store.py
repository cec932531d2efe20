"""Order storage for orderdesk."""

from pathlib import Path

from .config import DATA_DIR
from .document_store import JsonDocumentFile
from .errors import ConflictError, DuplicateOrderError, OrderNotFoundError
from .models import Order, OrderStatus, _utc_now, parse_timestamp

ORDERS_FILE = "orders.json"


class OrderStore:
    """Manages order documents.

    Writes go through `add_order`, `replace_order` and `delete_stale_orders`,
    each a single locked read-modify-write of the orders file.
    """

    def __init__(self, config_dir: Path | None = None):
        """
        Initialize OrderStore.

        Args:
            config_dir: Override data directory (for testing).
        """
        self.config_dir = config_dir or DATA_DIR
        self._file = JsonDocumentFile(self.config_dir, ORDERS_FILE, "orders")

    def list_orders(self) -> list[Order]:
        """List all orders, newest first."""
        orders = [Order.from_dict(o) for o in self._file.documents()]
        orders.sort(key=lambda o: parse_timestamp(o.created_at), reverse=True)
        return orders

    def list_user_orders(self, user_id: str) -> list[Order]:
        """List a user's orders, newest first."""
        return [o for o in self.list_orders() if o.user_id == user_id]

    def get_order(self, order_id: str) -> Order:
        """
        Get an order by ID.

        Raises:
            OrderNotFoundError: If order doesn't exist.
        """
        for o in self._file.documents():
            if o["id"] == order_id:
                return Order.from_dict(o)
        raise OrderNotFoundError(order_id)

    def find_by_gateway_order_id(self, gateway_order_id: str) -> Order:
        """
        Get the order correlated with a gateway order id.

        Raises:
            OrderNotFoundError: If no order carries that gateway id.
        """
        for o in self._file.documents():
            gateway_order = o.get("gateway_order")
            if gateway_order is not None and gateway_order.get("id") == gateway_order_id:
                return Order.from_dict(o)
        raise OrderNotFoundError(gateway_order_id)

    def add_order(self, order: Order) -> Order:
        """
        Persist a new order.

        Raises:
            DuplicateOrderError: If the receipt id, or the gateway order id
                when present, is already used by another order.
        """
        with self._file.locked():
            data = self._file.load()
            for existing in data["orders"]:
                if existing["receipt_id"] == order.receipt_id:
                    raise DuplicateOrderError("receipt_id", order.receipt_id)
                gateway_order = existing.get("gateway_order")
                if (
                    order.gateway_order_id is not None
                    and gateway_order is not None
                    and gateway_order.get("id") == order.gateway_order_id
                ):
                    raise DuplicateOrderError("gateway order id", order.gateway_order_id)
            data["orders"].append(order.to_dict())
            self._file.save(data)
        return order

    def replace_order(self, order: Order, expected_version: int) -> Order:
        """
        Write back a modified order if nobody changed it since it was read.

        Args:
            order: The modified order.
            expected_version: The version the caller loaded.

        Returns:
            The stored order with its version bumped.

        Raises:
            OrderNotFoundError: If order doesn't exist.
            ConflictError: If the stored version differs from expected_version.
        """
        with self._file.locked():
            data = self._file.load()
            orders = data["orders"]

            for i, existing in enumerate(orders):
                if existing["id"] == order.id:
                    found = existing.get("version", 1)
                    if found != expected_version:
                        raise ConflictError(order.id, expected_version, found)
                    order.version = found + 1
                    order.updated_at = _utc_now()
                    orders[i] = order.to_dict()
                    self._file.save(data)
                    return order

            raise OrderNotFoundError(order.id)

    def delete_stale_orders(self, user_id: str) -> int:
        """
        Delete a user's unpaid orders still waiting for payment.

        Returns:
            Number of orders deleted.
        """
        with self._file.locked():
            data = self._file.load()
            kept = [
                o
                for o in data["orders"]
                if not (
                    o["user_id"] == user_id
                    and not o.get("is_paid", False)
                    and o.get("order_status") == OrderStatus.PENDING_PAYMENT.value
                )
            ]
            removed = len(data["orders"]) - len(kept)
            if removed:
                data["orders"] = kept
                self._file.save(data)
        return removed
