"""Order status and exchange transitions."""

from datetime import datetime, timedelta, timezone
from typing import Callable

from .config import Settings
from .errors import (
    DeliveryDateMissingError,
    ExchangeAlreadyActionedError,
    ExchangeReasonRequiredError,
    ExchangeWindowClosedError,
    ForbiddenError,
    InvalidActionError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    NotAwaitingApprovalError,
    OrderNotDeliveredError,
    TrackingIdRequiredError,
)
from .log import get_logger
from .models import (
    ExchangeStatus,
    Order,
    OrderStatus,
    PaymentMethod,
    ShippingInfo,
    format_timestamp,
    parse_timestamp,
)
from .order_store import OrderStore

# Statuses an admin may move an order to, keyed by its current status.
# Pending Payment reaches Processing only through payment verification.
# Exchange Requested is resolved only through manage_exchange.
ADMIN_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset(
        {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.EXCHANGE_REQUESTED: frozenset(),
}

EXCHANGE_ACTIONS = ("approve", "reject")


def _utc_clock() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusError(value)


class OrderLifecycle:
    """Applies admin and customer transitions to stored orders.

    Every operation validates against the order as loaded and writes it
    back with a version check, so a failed check never leaves a partial
    change behind.
    """

    def __init__(
        self,
        orders: OrderStore,
        settings: Settings,
        clock: Callable[[], datetime] = _utc_clock,
    ):
        self.orders = orders
        self.settings = settings
        self.clock = clock
        self._log = get_logger("lifecycle")

    def update_status(self, order_id: str, status: str, tracking_id: str | None = None) -> Order:
        """
        Move an order to a new status (admin).

        Shipping records the carrier and tracking id. Delivery stamps
        delivered_at and settles cash-on-delivery orders.

        Raises:
            OrderNotFoundError: If order doesn't exist.
            InvalidStatusError: If status isn't a known status.
            TrackingIdRequiredError: If shipping without a tracking id.
            InvalidStatusTransitionError: If the move isn't allowed.
            ConflictError: If the order changed concurrently.
        """
        order = self.orders.get_order(order_id)
        target = parse_status(status)

        if target is OrderStatus.SHIPPED and not (tracking_id or "").strip():
            raise TrackingIdRequiredError()

        if target not in ADMIN_TRANSITIONS[order.order_status]:
            raise InvalidStatusTransitionError(order.order_status.value, target.value)

        expected_version = order.version
        previous = order.order_status

        if target is OrderStatus.SHIPPED:
            order.shipping_info = ShippingInfo(
                provider=self.settings.shipping_provider,
                tracking_id=tracking_id.strip(),
            )
        elif target is OrderStatus.DELIVERED:
            order.delivered_at = format_timestamp(self.clock())
            if order.payment_method is PaymentMethod.COD:
                order.is_paid = True

        order.order_status = target
        self.orders.replace_order(order, expected_version)

        self._log.info(
            "order_status_updated",
            order_id=order.id,
            from_status=previous.value,
            to_status=target.value,
        )
        return order

    def request_exchange(self, order_id: str, user_id: str, reason: str | None) -> Order:
        """
        Ask for an exchange of a delivered order (owner only).

        Raises:
            OrderNotFoundError: If order doesn't exist.
            ForbiddenError: If the order belongs to someone else.
            ExchangeReasonRequiredError: If reason is blank.
            OrderNotDeliveredError: If the order isn't delivered.
            DeliveryDateMissingError: If the delivery time wasn't recorded.
            ExchangeAlreadyActionedError: If an exchange was already requested.
            ExchangeWindowClosedError: If the window after delivery has passed.
        """
        order = self.orders.get_order(order_id)

        if order.user_id != user_id:
            raise ForbiddenError("Not authorized")
        if not reason or not reason.strip():
            raise ExchangeReasonRequiredError()
        if order.order_status is not OrderStatus.DELIVERED:
            raise OrderNotDeliveredError(order.order_status.value)
        if not order.delivered_at:
            raise DeliveryDateMissingError(order.id)
        if order.exchange_status is not ExchangeStatus.NONE:
            raise ExchangeAlreadyActionedError(order.exchange_status.value)

        window = timedelta(days=self.settings.exchange_window_days)
        if self.clock() - parse_timestamp(order.delivered_at) > window:
            raise ExchangeWindowClosedError(self.settings.exchange_window_days)

        expected_version = order.version
        order.order_status = OrderStatus.EXCHANGE_REQUESTED
        order.exchange_status = ExchangeStatus.REQUESTED
        order.exchange_reason = reason.strip()
        self.orders.replace_order(order, expected_version)

        self._log.info("exchange_requested", order_id=order.id, user_id=user_id)
        return order

    def manage_exchange(self, order_id: str, action: str | None) -> Order:
        """
        Approve or reject a pending exchange (admin).

        Approval reopens fulfilment for the replacement; rejection returns
        the order to Delivered.

        Raises:
            OrderNotFoundError: If order doesn't exist.
            NotAwaitingApprovalError: If no exchange is awaiting a decision.
            InvalidActionError: If action isn't approve or reject.
        """
        order = self.orders.get_order(order_id)

        if order.order_status is not OrderStatus.EXCHANGE_REQUESTED:
            raise NotAwaitingApprovalError(order.order_status.value)
        if action not in EXCHANGE_ACTIONS:
            raise InvalidActionError(str(action))

        expected_version = order.version
        if action == "approve":
            order.order_status = OrderStatus.PROCESSING
            order.exchange_status = ExchangeStatus.APPROVED
        else:
            order.order_status = OrderStatus.DELIVERED
            order.exchange_status = ExchangeStatus.REJECTED
        self.orders.replace_order(order, expected_version)

        self._log.info("exchange_resolved", order_id=order.id, action=action)
        return order
