"""Custom exceptions for orderdesk."""


class OrderdeskError(Exception):
    """Base exception for all orderdesk errors."""

    pass


# --- Storage ---


class InvalidSchemaVersionError(OrderdeskError):
    """Raised when a data file has an unsupported schema version."""

    def __init__(self, found: int, supported: int):
        self.found = found
        self.supported = supported
        super().__init__(
            f"Unsupported schema version {found}. This tool supports version {supported}."
        )


class ConflictError(OrderdeskError):
    """Raised when an order was modified since it was read."""

    def __init__(self, order_id: str, expected: int, found: int):
        self.order_id = order_id
        self.expected = expected
        self.found = found
        super().__init__(
            f"Order {order_id} was modified concurrently "
            f"(expected version {expected}, found {found})"
        )


class DuplicateOrderError(OrderdeskError):
    """Raised when a receipt or gateway order id is already taken."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"An order with {field} '{value}' already exists")


# --- Lookups ---


class OrderNotFoundError(OrderdeskError):
    """Raised when an order doesn't exist."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class ProductNotFoundError(OrderdeskError):
    """Raised when a requested product has no catalog entry."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class DuplicateProductError(OrderdeskError):
    """Raised when seeding a product id that already exists."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product already exists: {product_id}")


class InvalidPriceError(OrderdeskError):
    """Raised when a catalog price can't be charged in whole minor units."""

    def __init__(self, product_id: str, price: str, reason: str):
        self.product_id = product_id
        self.price = price
        super().__init__(f"Invalid price '{price}' for {product_id}: {reason}")


# --- Identity ---


class UnauthenticatedError(OrderdeskError):
    """Raised when a request carries no resolved identity."""

    def __init__(self):
        super().__init__("Authentication required")


class ForbiddenError(OrderdeskError):
    """Raised when the caller may not act on a resource."""

    def __init__(self, reason: str = "Not authorized"):
        self.reason = reason
        super().__init__(reason)


# --- Order creation ---


class EmptyOrderError(OrderdeskError):
    """Raised when an order has no line items."""

    def __init__(self):
        super().__init__("No products in order.")


class InvalidLineItemError(OrderdeskError):
    """Raised when a line item is malformed."""

    def __init__(self, product_id: str, reason: str):
        self.product_id = product_id
        super().__init__(f"Invalid line item {product_id}: {reason}")


class MissingPaymentMethodError(OrderdeskError):
    """Raised when no payment method was chosen."""

    def __init__(self):
        super().__init__("Payment method is required.")


class InvalidPaymentMethodError(OrderdeskError):
    """Raised when the payment method is not supported."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Invalid payment method: {method}")


class PaymentGatewayError(OrderdeskError):
    """Raised when the payment gateway fails or times out."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Payment gateway error: {reason}")


class GatewayNotConfiguredError(OrderdeskError):
    """Raised when gateway credentials or the signing secret are missing."""

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"Payment gateway is not configured (missing {setting})")


# --- Payment verification ---


class InvalidSignatureError(OrderdeskError):
    """Raised when a payment confirmation signature doesn't match."""

    def __init__(self, gateway_order_id: str):
        self.gateway_order_id = gateway_order_id
        super().__init__("Invalid payment signature.")


class PaymentAlreadyRecordedError(OrderdeskError):
    """Raised when a paid order receives a confirmation for another payment."""

    def __init__(self, order_id: str, payment_id: str):
        self.order_id = order_id
        self.payment_id = payment_id
        super().__init__(
            f"Order {order_id} is already paid by payment {payment_id}"
        )


# --- Lifecycle ---


class InvalidStatusError(OrderdeskError):
    """Raised when a status value is not a known order status."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid order status: {status}")


class InvalidStatusTransitionError(OrderdeskError):
    """Raised when the requested status isn't reachable from the current one."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change order status from '{current}' to '{requested}'"
        )


class TrackingIdRequiredError(OrderdeskError):
    """Raised when shipping an order without a tracking id."""

    def __init__(self):
        super().__init__("Tracking ID is required to ship an order.")


class ExchangeReasonRequiredError(OrderdeskError):
    """Raised when an exchange is requested without a reason."""

    def __init__(self):
        super().__init__("An exchange reason is required.")


class OrderNotDeliveredError(OrderdeskError):
    """Raised when an exchange is requested on an undelivered order."""

    def __init__(self, current: str):
        self.current = current
        super().__init__(f'Order is not "Delivered" (current status: {current}).')


class DeliveryDateMissingError(OrderdeskError):
    """Raised when a delivered order has no delivery timestamp."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Order delivery date is not set.")


class ExchangeAlreadyActionedError(OrderdeskError):
    """Raised when an exchange was already requested or resolved."""

    def __init__(self, current: str):
        self.current = current
        super().__init__(f"Exchange already {current.lower()}.")


class ExchangeWindowClosedError(OrderdeskError):
    """Raised when the exchange window after delivery has elapsed."""

    def __init__(self, window_days: int):
        self.window_days = window_days
        super().__init__(f"The {window_days}-day exchange window has closed.")


class NotAwaitingApprovalError(OrderdeskError):
    """Raised when managing an exchange on an order that didn't request one."""

    def __init__(self, current: str):
        self.current = current
        super().__init__(
            f"This order is not awaiting exchange approval (current status: {current})."
        )


class InvalidActionError(OrderdeskError):
    """Raised when an exchange action isn't approve or reject."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Invalid action: {action}")
