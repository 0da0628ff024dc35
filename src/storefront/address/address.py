"""Address aggregate: a customer's saved delivery addresses.

Each address is its own aggregate so it can be referenced from checkout by id.
The "at most one default per customer" rule spans aggregates, so it is kept
by the address book handler, which demotes and promotes within one unit of
work.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.address.events import AddressAdded, AddressUpdated, DefaultAddressChanged
from storefront.domain import storefront
from storefront.errors import AddressNotFoundError, ForbiddenError

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


@storefront.aggregate
class Address:
    customer_id = Identifier(required=True)
    recipient_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    street_address = String(required=True, max_length=500)
    country_id = Identifier(required=True)
    county_id = Identifier(required=True)
    city_id = Identifier(required=True)
    is_default = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id, recipient_name, phone, street_address, country_id, county_id, city_id, is_default=False):
        now = datetime.now(UTC)
        address = cls(
            customer_id=customer_id,
            recipient_name=recipient_name,
            phone=phone,
            street_address=street_address,
            country_id=country_id,
            county_id=county_id,
            city_id=city_id,
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )
        address.raise_(
            AddressAdded(
                address_id=str(address.id),
                customer_id=str(customer_id),
                city_id=str(city_id),
                is_default=is_default,
            )
        )
        return address

    def update(
        self,
        recipient_name=_UNSET,
        phone=_UNSET,
        street_address=_UNSET,
        country_id=_UNSET,
        county_id=_UNSET,
        city_id=_UNSET,
    ):
        changes = {
            "recipient_name": recipient_name,
            "phone": phone,
            "street_address": street_address,
            "country_id": country_id,
            "county_id": county_id,
            "city_id": city_id,
        }
        for field_name, value in changes.items():
            if value is not _UNSET and value is not None:
                setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(AddressUpdated(address_id=str(self.id), customer_id=str(self.customer_id)))

    def make_default(self):
        if self.is_default:
            return
        self.is_default = True
        self.updated_at = datetime.now(UTC)
        self.raise_(DefaultAddressChanged(address_id=str(self.id), customer_id=str(self.customer_id), is_default=True))

    def unset_default(self):
        if not self.is_default:
            return
        self.is_default = False
        self.updated_at = datetime.now(UTC)
        self.raise_(DefaultAddressChanged(address_id=str(self.id), customer_id=str(self.customer_id), is_default=False))

    def format_line(self, city_name=None):
        """One-line rendering used on the order's shipping details."""
        parts = [self.street_address]
        if city_name:
            parts.append(city_name)
        return ", ".join(parts)


def addresses_for(customer_id):
    """All of a customer's addresses, default first, then newest first."""
    repo = current_domain.repository_for(Address)
    addresses = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    newest_first = sorted(addresses, key=lambda a: a.created_at, reverse=True)
    return sorted(newest_first, key=lambda a: not a.is_default)


def load_owned_address(address_id, customer_id):
    """Fetch an address and check it belongs to the caller."""
    try:
        address = current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError:
        raise AddressNotFoundError(address_id) from None

    if str(address.customer_id) != str(customer_id):
        raise ForbiddenError({"address_id": ["Address does not belong to this customer"]})
    return address
