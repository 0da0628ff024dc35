"""Voucher administration: commands and handler."""

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ConflictError
from storefront.voucher.validation import find_voucher
from storefront.voucher.voucher import UNSET, DiscountType, Voucher


@storefront.command(part_of="Voucher")
class CreateVoucher:
    code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    expires_at = DateTime()
    is_active = Boolean(default=True)


@storefront.command(part_of="Voucher")
class UpdateVoucher:
    voucher_id = Identifier(required=True)
    discount_type = String(choices=DiscountType)
    discount_value = Float(min_value=0.0)
    expires_at = DateTime()
    clear_expiry = Boolean(default=False)
    is_active = Boolean()


@storefront.command(part_of="Voucher")
class DeleteVoucher:
    voucher_id = Identifier(required=True)


@storefront.command_handler(part_of=Voucher)
class ManageVoucherHandler:
    @handle(CreateVoucher)
    def create_voucher(self, command):
        if find_voucher(command.code) is not None:
            raise ConflictError({"code": [f"Voucher {command.code.upper()} already exists"]})

        voucher = Voucher.create(
            code=command.code,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            expires_at=command.expires_at,
            is_active=command.is_active,
        )
        current_domain.repository_for(Voucher).add(voucher)
        return str(voucher.id)

    @handle(UpdateVoucher)
    def update_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        voucher = repo.get(command.voucher_id)
        if command.clear_expiry:
            expires_at = None
        else:
            expires_at = command.expires_at if command.expires_at is not None else UNSET

        voucher.update(
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            expires_at=expires_at,
            is_active=command.is_active,
        )
        repo.add(voucher)

    @handle(DeleteVoucher)
    def delete_voucher(self, command):
        repo = current_domain.repository_for(Voucher)
        voucher = repo.get(command.voucher_id)
        repo._dao.delete(voucher)
