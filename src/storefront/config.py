"""Business settings for the storefront, read from the environment.

Infrastructure (databases, brokers, event store) is configured through
``domain.toml``; this module covers the knobs checkout and payment logic need.
"""

import os
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class StorefrontSettings:
    tax_rate: Decimal = Decimal("0.16")
    currency: str = "KES"
    payment_gateway: str = "fake"
    paystack_secret_key: str | None = None
    paystack_base_url: str = "https://api.paystack.co"
    webhook_secret: str | None = None
    payment_poll_attempts: int = 15
    payment_poll_interval: float = 2.0

    @classmethod
    def from_env(cls) -> "StorefrontSettings":
        return cls(
            tax_rate=Decimal(os.getenv("STOREFRONT_TAX_RATE", "0.16")),
            currency=os.getenv("STOREFRONT_CURRENCY", "KES"),
            payment_gateway=os.getenv("STOREFRONT_PAYMENT_GATEWAY", "fake").lower(),
            paystack_secret_key=os.getenv("PAYSTACK_SECRET_KEY"),
            paystack_base_url=os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co"),
            webhook_secret=os.getenv("STOREFRONT_WEBHOOK_SECRET"),
            payment_poll_attempts=int(os.getenv("STOREFRONT_PAYMENT_POLL_ATTEMPTS", "15")),
            payment_poll_interval=float(os.getenv("STOREFRONT_PAYMENT_POLL_INTERVAL", "2.0")),
        )


_settings: StorefrontSettings | None = None


def get_settings() -> StorefrontSettings:
    """Return the active settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = StorefrontSettings.from_env()
    return _settings


def set_settings(settings: StorefrontSettings) -> None:
    """Override the active settings (useful for tests)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    global _settings
    _settings = None
