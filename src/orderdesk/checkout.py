"""Order creation for both payment methods."""

import secrets

from .config import Settings
from .errors import (
    EmptyOrderError,
    InvalidPaymentMethodError,
    MissingPaymentMethodError,
    PaymentGatewayError,
)
from .gateway import PaymentGateway
from .log import get_logger
from .models import LineItem, Order, OrderStatus, PaymentMethod, ShippingAddress
from .order_store import OrderStore
from .pricing import Catalog, resolve_prices


def generate_receipt_id() -> str:
    return f"receipt_{secrets.token_hex(8)}"


def parse_payment_method(value: str | None) -> PaymentMethod:
    """
    Raises:
        MissingPaymentMethodError: If no method was given.
        InvalidPaymentMethodError: If the method isn't supported.
    """
    if not value:
        raise MissingPaymentMethodError()
    try:
        return PaymentMethod(value)
    except ValueError:
        raise InvalidPaymentMethodError(value)


class Checkout:
    """Turns a cart submission into a persisted order."""

    def __init__(
        self,
        orders: OrderStore,
        catalog: Catalog,
        gateway: PaymentGateway,
        settings: Settings,
    ):
        self.orders = orders
        self.catalog = catalog
        self.gateway = gateway
        self.settings = settings
        self._log = get_logger("checkout")

    def create_order(
        self,
        user_id: str,
        line_items: list[LineItem],
        shipping_address: ShippingAddress,
        payment_method: str | None,
    ) -> Order:
        """
        Create an order priced from the catalog.

        Gateway orders start in "Pending Payment" and carry the gateway's
        order object; cash-on-delivery orders start in "Processing". Any
        unpaid pending orders the user left behind are deleted first.

        Raises:
            EmptyOrderError, MissingPaymentMethodError,
            InvalidPaymentMethodError: On invalid input.
            ProductNotFoundError: If a product isn't in the catalog.
            PaymentGatewayError: If the gateway call fails; nothing is saved.
        """
        if not line_items:
            raise EmptyOrderError()
        method = parse_payment_method(payment_method)

        priced = resolve_prices(self.catalog, line_items)

        reaped = self.orders.delete_stale_orders(user_id)
        if reaped:
            self._log.info("stale_orders_reaped", user_id=user_id, count=reaped)

        receipt_id = generate_receipt_id()

        if method is PaymentMethod.GATEWAY:
            try:
                gateway_order = self.gateway.create_order(
                    amount=priced.amount,
                    currency=self.settings.currency_code,
                    receipt=receipt_id,
                )
            except PaymentGatewayError as e:
                self._log.error(
                    "gateway_order_failed",
                    user_id=user_id,
                    receipt_id=receipt_id,
                    reason=e.reason,
                )
                raise
            order = Order.create(
                user_id=user_id,
                products=priced.lines,
                amount=priced.amount,
                shipping_address=shipping_address,
                payment_method=method,
                receipt_id=receipt_id,
                order_status=OrderStatus.PENDING_PAYMENT,
                gateway_order=gateway_order,
            )
        else:
            order = Order.create(
                user_id=user_id,
                products=priced.lines,
                amount=priced.amount,
                shipping_address=shipping_address,
                payment_method=method,
                receipt_id=receipt_id,
                order_status=OrderStatus.PROCESSING,
            )

        self.orders.add_order(order)
        self._log.info(
            "order_created",
            order_id=order.id,
            user_id=user_id,
            amount=order.amount,
            payment_method=method.value,
            order_status=order.order_status.value,
        )
        return order
