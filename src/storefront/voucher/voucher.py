"""Voucher aggregate: discount codes redeemable at checkout.

Codes are stored upper-cased and matched case-insensitively. A voucher
discounts either a percentage of the subtotal or a fixed amount. Redemption
is not counted; a valid voucher can be used any number of times.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from storefront.domain import storefront
from storefront.voucher.events import VoucherCreated, VoucherUpdated


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# Sentinel for distinguishing "not provided" from None in partial updates
UNSET = object()


def normalize_code(code):
    return (code or "").strip().upper()


@storefront.aggregate
class Voucher:
    code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    expires_at = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def percentage_cannot_exceed_one_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discounts must be between 0 and 100"]})

    @classmethod
    def create(cls, code, discount_type, discount_value, expires_at=None, is_active=True):
        now = datetime.now(UTC)
        voucher = cls(
            code=normalize_code(code),
            discount_type=discount_type,
            discount_value=discount_value,
            expires_at=expires_at,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        voucher.raise_(
            VoucherCreated(
                voucher_id=str(voucher.id),
                code=voucher.code,
                discount_type=discount_type,
                discount_value=discount_value,
            )
        )
        return voucher

    def update(self, discount_type=None, discount_value=None, expires_at=UNSET, is_active=None):
        """Apply the given changes. Passing ``expires_at=None`` removes the expiry."""
        if discount_type is not None:
            self.discount_type = discount_type
        if discount_value is not None:
            self.discount_value = discount_value
        if expires_at is not UNSET:
            self.expires_at = expires_at
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VoucherUpdated(
                voucher_id=str(self.id),
                code=self.code,
                discount_type=self.discount_type,
                discount_value=self.discount_value,
                is_active=self.is_active,
            )
        )

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at < now
