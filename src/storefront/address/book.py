"""Address book: commands and handler.

Keeps a customer's addresses consistent: at most one default, and a customer
who has addresses always has a default. Demotions and promotions happen in
the same unit of work as the change that triggers them.
"""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.address.address import Address, addresses_for, load_owned_address
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Address")
class AddAddress:
    customer_id = Identifier(required=True)
    recipient_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    street_address = String(required=True, max_length=500)
    country_id = Identifier(required=True)
    county_id = Identifier(required=True)
    city_id = Identifier(required=True)
    is_default = Boolean(default=False)


@storefront.command(part_of="Address")
class UpdateAddress:
    address_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    recipient_name = String(max_length=255)
    phone = String(max_length=30)
    street_address = String(max_length=500)
    country_id = Identifier()
    county_id = Identifier()
    city_id = Identifier()
    is_default = Boolean()


@storefront.command(part_of="Address")
class RemoveAddress:
    address_id = Identifier(required=True)
    customer_id = Identifier(required=True)


def _demote_other_defaults(repo, customer_id, keep_id=None):
    for other in addresses_for(customer_id):
        if other.is_default and str(other.id) != str(keep_id):
            other.unset_default()
            repo.add(other)


def add_address(customer_id, recipient_name, phone, street_address, country_id, county_id, city_id, is_default=False):
    """Create an address, making it the default when asked or when it is the first one."""
    repo = current_domain.repository_for(Address)
    make_default = bool(is_default) or not addresses_for(customer_id)

    if make_default:
        _demote_other_defaults(repo, customer_id)

    address = Address.create(
        customer_id=customer_id,
        recipient_name=recipient_name,
        phone=phone,
        street_address=street_address,
        country_id=country_id,
        county_id=county_id,
        city_id=city_id,
        is_default=make_default,
    )
    repo.add(address)
    return address


@storefront.command_handler(part_of=Address)
class AddressBookHandler:
    @handle(AddAddress)
    def add_address(self, command):
        address = add_address(
            customer_id=command.customer_id,
            recipient_name=command.recipient_name,
            phone=command.phone,
            street_address=command.street_address,
            country_id=command.country_id,
            county_id=command.county_id,
            city_id=command.city_id,
            is_default=command.is_default,
        )
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Address)
        address = load_owned_address(command.address_id, command.customer_id)

        address.update(
            recipient_name=command.recipient_name,
            phone=command.phone,
            street_address=command.street_address,
            country_id=command.country_id,
            county_id=command.county_id,
            city_id=command.city_id,
        )

        # Clearing the flag on the default is ignored: a default must remain
        if command.is_default and not address.is_default:
            _demote_other_defaults(repo, command.customer_id, keep_id=address.id)
            address.make_default()

        repo.add(address)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Address)
        address = load_owned_address(command.address_id, command.customer_id)
        was_default = address.is_default
        remaining = [a for a in addresses_for(command.customer_id) if str(a.id) != str(address.id)]

        repo._dao.delete(address)

        if was_default:
            if remaining:
                successor = max(remaining, key=lambda a: a.updated_at)
                successor.make_default()
                repo.add(successor)
                logger.info(
                    "default_address_promoted",
                    customer_id=str(command.customer_id),
                    address_id=str(successor.id),
                )
