"""Domain events for the Voucher aggregate."""

from protean.fields import Boolean, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Voucher")
class VoucherCreated:
    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    discount_type = String(required=True, max_length=20)
    discount_value = Float(required=True)


@storefront.event(part_of="Voucher")
class VoucherUpdated:
    __version__ = 1

    voucher_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    discount_type = String(required=True, max_length=20)
    discount_value = Float(required=True)
    is_active = Boolean(required=True)
