"""Payment gateway client (Razorpay orders API)."""

from typing import Any, Protocol

import httpx

from .config import Settings
from .errors import GatewayNotConfiguredError, PaymentGatewayError


class PaymentGateway(Protocol):
    def create_order(self, amount: int, currency: str, receipt: str) -> dict[str, Any]: ...


class RazorpayGateway:
    """Creates gateway-side orders that a client then pays against."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize RazorpayGateway.

        Args:
            key_id: API key id (basic auth user).
            key_secret: API key secret (basic auth password).
            base_url: API root, e.g. https://api.razorpay.com/v1.
            timeout: Seconds before a request is abandoned.
            transport: Override HTTP transport (for testing).
        """
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "RazorpayGateway":
        return cls(
            key_id=settings.gateway_key_id,
            key_secret=settings.gateway_secret,
            base_url=settings.gateway_base_url,
            timeout=settings.gateway_timeout,
        )

    def create_order(self, amount: int, currency: str, receipt: str) -> dict[str, Any]:
        """
        Create a gateway order for `amount` minor units.

        Returns:
            The gateway's order object; its "id" correlates later payments.

        Raises:
            GatewayNotConfiguredError: If credentials are missing.
            PaymentGatewayError: On transport failure, timeout, an error
                status or a response without an order id.
        """
        if not self.key_id or not self.key_secret:
            raise GatewayNotConfiguredError("gateway key id/secret")

        payload = {"amount": amount, "currency": currency, "receipt": receipt}
        try:
            with httpx.Client(
                base_url=self.base_url,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.post("/orders", json=payload)
        except httpx.TimeoutException:
            raise PaymentGatewayError("request timed out")
        except httpx.HTTPError as e:
            raise PaymentGatewayError(str(e) or type(e).__name__)

        if response.is_error:
            raise PaymentGatewayError(f"HTTP {response.status_code}: {_error_description(response)}")

        try:
            body = response.json()
        except ValueError:
            raise PaymentGatewayError("response is not JSON")

        if not isinstance(body, dict) or not body.get("id"):
            raise PaymentGatewayError("response has no order id")
        return body


def _error_description(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["description"]
    except (ValueError, KeyError, TypeError):
        return response.text[:200]
