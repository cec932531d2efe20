"""Runtime settings for orderdesk."""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Can be overridden via ORDERDESK_DATA_DIR environment variable
_default_data_dir = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.environ.get("ORDERDESK_DATA_DIR", _default_data_dir))

DEFAULT_GATEWAY_BASE_URL = "https://api.razorpay.com/v1"
DEFAULT_CURRENCY = "INR"
DEFAULT_EXCHANGE_WINDOW_DAYS = 7
DEFAULT_SHIPPING_PROVIDER = "Delhivery"


@dataclass
class Settings:
    """Settings injected into checkout, payment verification and the lifecycle."""

    data_dir: Path = field(default_factory=lambda: DATA_DIR)
    gateway_key_id: str = ""
    gateway_secret: str = ""
    signing_secret: str = ""
    gateway_base_url: str = DEFAULT_GATEWAY_BASE_URL
    gateway_timeout: float = 10.0
    currency_code: str = DEFAULT_CURRENCY
    exchange_window_days: int = DEFAULT_EXCHANGE_WINDOW_DAYS
    shipping_provider: str = DEFAULT_SHIPPING_PROVIDER
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # The gateway signs callbacks with the key secret unless told otherwise
        if not self.signing_secret:
            self.signing_secret = self.gateway_secret

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from ORDERDESK_* environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            data_dir=Path(env.get("ORDERDESK_DATA_DIR", _default_data_dir)),
            gateway_key_id=env.get("ORDERDESK_GATEWAY_KEY_ID", ""),
            gateway_secret=env.get("ORDERDESK_GATEWAY_SECRET", ""),
            signing_secret=env.get("ORDERDESK_SIGNING_SECRET", ""),
            gateway_base_url=env.get("ORDERDESK_GATEWAY_BASE_URL", DEFAULT_GATEWAY_BASE_URL),
            gateway_timeout=float(env.get("ORDERDESK_GATEWAY_TIMEOUT", "10")),
            currency_code=env.get("ORDERDESK_CURRENCY", DEFAULT_CURRENCY),
            exchange_window_days=int(
                env.get("ORDERDESK_EXCHANGE_WINDOW_DAYS", DEFAULT_EXCHANGE_WINDOW_DAYS)
            ),
            shipping_provider=env.get("ORDERDESK_SHIPPING_PROVIDER", DEFAULT_SHIPPING_PROVIDER),
            log_level=env.get("ORDERDESK_LOG_LEVEL", "INFO"),
        )
