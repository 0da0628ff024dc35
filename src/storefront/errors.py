"""Storefront failure modes.

Every checkout and payment failure is its own exception class so the HTTP
layer can map it to a distinct status. All of them build on Protean's
exceptions and carry a field-keyed ``messages`` dict.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class EmptyCartError(ValidationError):
    """Checkout was attempted with no items in the cart."""

    def __init__(self):
        super().__init__({"cart": ["Your cart is empty"]})


class OutOfStockError(ValidationError):
    """One or more cart lines ask for more than is in stock."""

    def __init__(self, offenders):
        self.offenders = list(offenders)
        super().__init__(
            {
                "items": [
                    f"{o['name']}: requested {o['requested']}, only {o['available']} available"
                    for o in self.offenders
                ]
            }
        )


class VoucherInvalidError(ValidationError):
    pass


class VoucherNotFoundError(VoucherInvalidError, ObjectNotFoundError):
    """No voucher has this code. Still a voucher failure, answered as not found."""

    def __init__(self, code):
        super().__init__({"voucher_code": [f"Voucher {code} not found"]})


class VoucherExpiredError(VoucherInvalidError):
    def __init__(self, code):
        super().__init__({"voucher_code": [f"Voucher {code} has expired"]})


class VoucherInactiveError(VoucherInvalidError):
    def __init__(self, code):
        super().__init__({"voucher_code": [f"Voucher {code} is not active"]})


class AddressNotFoundError(ObjectNotFoundError):
    def __init__(self, address_id):
        super().__init__({"address_id": [f"Address {address_id} not found"]})


class OrderNotFoundError(ObjectNotFoundError):
    def __init__(self, order_number):
        super().__init__({"order_number": [f"Order {order_number} not found"]})


class ForbiddenError(ValidationError):
    """The caller does not own the resource it tried to change."""


class ConflictError(ValidationError):
    """The change collides with existing state (duplicate code, etc.)."""


class ExternalServiceError(ValidationError):
    """The payment gateway or another upstream service failed."""
