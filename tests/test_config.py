"""Tests for settings and structured log events."""

from pathlib import Path

import pytest
import structlog
from structlog.testing import capture_logs

from conftest import SIGNING_SECRET
from orderdesk.checkout import Checkout
from orderdesk.config import DEFAULT_GATEWAY_BASE_URL, Settings
from orderdesk.errors import InvalidSignatureError
from orderdesk.log import configure_logging
from orderdesk.models import LineItem
from orderdesk.payments import PaymentVerifier


class TestSettingsFromEnv:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.gateway_base_url == DEFAULT_GATEWAY_BASE_URL
        assert settings.currency_code == "INR"
        assert settings.exchange_window_days == 7
        assert settings.shipping_provider == "Delhivery"
        assert settings.signing_secret == ""

    def test_reads_environment(self, temp_dir):
        settings = Settings.from_env({
            "ORDERDESK_DATA_DIR": str(temp_dir),
            "ORDERDESK_GATEWAY_KEY_ID": "rzp_live",
            "ORDERDESK_GATEWAY_SECRET": "gw-secret",
            "ORDERDESK_GATEWAY_TIMEOUT": "2.5",
            "ORDERDESK_EXCHANGE_WINDOW_DAYS": "14",
            "ORDERDESK_CURRENCY": "USD",
        })

        assert settings.data_dir == Path(temp_dir)
        assert settings.gateway_key_id == "rzp_live"
        assert settings.signing_secret == "gw-secret"
        assert settings.gateway_timeout == 2.5
        assert settings.exchange_window_days == 14
        assert settings.currency_code == "USD"

    def test_separate_signing_secret(self):
        settings = Settings.from_env({
            "ORDERDESK_GATEWAY_SECRET": "gw-secret",
            "ORDERDESK_SIGNING_SECRET": "webhook-secret",
        })

        assert settings.signing_secret == "webhook-secret"


class TestLogEvents:
    def test_order_created_event(self, order_store, product_store, gateway, settings, shipping_address):
        with capture_logs() as logs:
            checkout = Checkout(order_store, product_store, gateway, settings)
            order = checkout.create_order("user-1", [LineItem("PROD001", 1)], shipping_address, "COD")

        created = [e for e in logs if e["event"] == "order_created"]
        assert len(created) == 1
        assert created[0]["order_id"] == order.id
        assert created[0]["component"] == "checkout"

    def test_rejected_signature_is_logged(self, order_store, settings):
        with capture_logs() as logs:
            verifier = PaymentVerifier(order_store, settings)
            with pytest.raises(InvalidSignatureError):
                verifier.verify("order_X", "pay_1", "bad")

        assert logs[-1]["event"] == "payment_signature_rejected"
        assert logs[-1]["log_level"] == "warning"
        assert SIGNING_SECRET not in str(logs[-1])


def test_configure_logging_json(capsys):
    try:
        configure_logging("INFO", json=True)
        structlog.get_logger().info("hello", answer=42)
        structlog.get_logger().debug("hidden")
        out = capsys.readouterr().out
    finally:
        structlog.reset_defaults()

    assert '"event": "hello"' in out
    assert '"answer": 42' in out
    assert "hidden" not in out
