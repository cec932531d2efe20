"""Verification of signed payment confirmations."""

import hashlib
import hmac

from .config import Settings
from .errors import (
    ConflictError,
    GatewayNotConfiguredError,
    InvalidSignatureError,
    PaymentAlreadyRecordedError,
)
from .log import get_logger
from .models import Order, OrderStatus, PaymentInfo
from .order_store import OrderStore


def compute_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    """HMAC-SHA256 hex digest of "<order_id>|<payment_id>"."""
    message = f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class PaymentVerifier:
    """Marks gateway orders paid once their confirmation signature checks out.

    Confirmations may arrive more than once, and concurrently. Applying the
    same confirmation again leaves the order as it is.
    """

    def __init__(self, orders: OrderStore, settings: Settings):
        self.orders = orders
        self.settings = settings
        self._log = get_logger("payments")

    def verify(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> Order:
        """
        Verify a payment confirmation and record it on the matching order.

        Raises:
            GatewayNotConfiguredError: If no signing secret is configured.
            InvalidSignatureError: If the signature doesn't match.
            OrderNotFoundError: If no order carries the gateway order id.
            PaymentAlreadyRecordedError: If the order was paid by another payment.
        """
        secret = self.settings.signing_secret
        if not secret:
            raise GatewayNotConfiguredError("signing secret")

        expected = compute_signature(secret, gateway_order_id, gateway_payment_id)
        if not hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8")):
            self._log.warning(
                "payment_signature_rejected",
                gateway_order_id=gateway_order_id,
                gateway_payment_id=gateway_payment_id,
            )
            raise InvalidSignatureError(gateway_order_id)

        order = self.orders.find_by_gateway_order_id(gateway_order_id)
        try:
            return self._record(order, gateway_payment_id, signature)
        except ConflictError:
            # A concurrent delivery may have just recorded this payment
            order = self.orders.get_order(order.id)
            return self._record(order, gateway_payment_id, signature)

    def _record(self, order: Order, payment_id: str, signature: str) -> Order:
        if order.is_paid and order.payment_info is not None:
            if order.payment_info.payment_id == payment_id:
                self._log.info("payment_redelivered", order_id=order.id, payment_id=payment_id)
                return order
            raise PaymentAlreadyRecordedError(order.id, order.payment_info.payment_id)

        expected_version = order.version
        order.is_paid = True
        order.order_status = OrderStatus.PROCESSING
        order.payment_info = PaymentInfo(payment_id=payment_id, signature=signature)
        self.orders.replace_order(order, expected_version)

        self._log.info("payment_verified", order_id=order.id, payment_id=payment_id)
        return order
