"""Domain events for the Address aggregate."""

from protean.fields import Boolean, Identifier

from storefront.domain import storefront


@storefront.event(part_of="Address")
class AddressAdded:
    __version__ = 1

    address_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    city_id = Identifier(required=True)
    is_default = Boolean(required=True)


@storefront.event(part_of="Address")
class AddressUpdated:
    __version__ = 1

    address_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.event(part_of="Address")
class DefaultAddressChanged:
    """The address became (or stopped being) the customer's default."""

    __version__ = 1

    address_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    is_default = Boolean(required=True)
