"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- PaystackGateway for production (selected with STOREFRONT_PAYMENT_GATEWAY=paystack)
"""

from storefront.config import get_settings
from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.paystack_adapter import PaystackGateway
from storefront.payment.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.payment_gateway == "paystack":
        if not settings.paystack_secret_key:
            raise RuntimeError("PAYSTACK_SECRET_KEY must be set to use the Paystack gateway")
        return PaystackGateway(secret_key=settings.paystack_secret_key, base_url=settings.paystack_base_url)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to the configured one."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
