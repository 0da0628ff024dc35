"""Checkout pricing.

Pure computation: no repository access and no logging. Every component is
rounded to two decimals half-up as it is produced, and the total is summed
from the rounded components so the snapshot always balances.

    subtotal = sum(unit_price * quantity)
    tax      = subtotal * tax_rate
    discount = subtotal * value / 100   (percentage vouchers)
             = value                    (fixed vouchers)
    total    = max(0, subtotal + shipping + tax - discount)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from storefront.config import StorefrontSettings, get_settings
from storefront.voucher.validation import VoucherTerms
from storefront.voucher.voucher import DiscountType

_CENTS = Decimal("0.01")
_ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PricingLine:
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class PricingSnapshot:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    currency: str

    def as_dict(self) -> dict:
        return {
            "subtotal": float(self.subtotal),
            "shipping": float(self.shipping),
            "tax": float(self.tax),
            "discount": float(self.discount),
            "total": float(self.total),
            "currency": self.currency,
        }


def to_decimal(value) -> Decimal:
    # str() first so binary floats like 0.1 become exactly 0.1
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def calculate_pricing(
    lines: Iterable[PricingLine],
    shipping_fee,
    voucher: VoucherTerms | None = None,
    settings: StorefrontSettings | None = None,
) -> PricingSnapshot:
    settings = settings or get_settings()

    subtotal = round_money(sum((to_decimal(line.unit_price) * line.quantity for line in lines), _ZERO))
    shipping = round_money(shipping_fee or 0)
    tax = round_money(subtotal * settings.tax_rate)

    discount = _ZERO
    if voucher is not None:
        if voucher.discount_type == DiscountType.PERCENTAGE:
            discount = round_money(subtotal * voucher.discount_value / Decimal(100))
        else:
            discount = round_money(voucher.discount_value)

    total = max(_ZERO, subtotal + shipping + tax - discount)

    return PricingSnapshot(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=discount,
        total=total,
        currency=settings.currency,
    )


def to_minor_units(amount) -> int:
    """Amount in the currency's smallest unit (cents), as payment gateways expect."""
    return int((round_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
