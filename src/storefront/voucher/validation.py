"""Voucher lookup and validation for checkout.

Read-only: validating a voucher never changes it.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from protean.utils.globals import current_domain

from storefront.errors import VoucherExpiredError, VoucherInactiveError, VoucherNotFoundError
from storefront.voucher.voucher import DiscountType, Voucher, normalize_code


@dataclass(frozen=True)
class VoucherTerms:
    """The discount a valid voucher grants, detached from the aggregate."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal


def find_voucher(code):
    """The voucher with this code (any casing), or None."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    matches = current_domain.repository_for(Voucher)._dao.query.filter(code=normalized).all().items
    return matches[0] if matches else None


def validate_voucher(code, now=None) -> VoucherTerms:
    voucher = find_voucher(code)
    if voucher is None:
        raise VoucherNotFoundError(normalize_code(code))
    if not voucher.is_active:
        raise VoucherInactiveError(voucher.code)
    if voucher.is_expired(now or datetime.now(UTC)):
        raise VoucherExpiredError(voucher.code)

    return VoucherTerms(
        code=voucher.code,
        discount_type=DiscountType(voucher.discount_type),
        discount_value=Decimal(str(voucher.discount_value)),
    )
