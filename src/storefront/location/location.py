"""Delivery locations: Country → County → City.

Cities carry the flat delivery fee charged at checkout. Only active cities
can be delivered to.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.location.events import CityCreated, CityUpdated, CountryCreated, CountyCreated


@storefront.aggregate
class Country:
    name = String(required=True, max_length=100)
    code = String(max_length=3)
    created_at = DateTime()

    @classmethod
    def create(cls, name, code=None):
        country = cls(name=name, code=code, created_at=datetime.now(UTC))
        country.raise_(CountryCreated(country_id=str(country.id), name=name))
        return country


@storefront.aggregate
class County:
    country_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    created_at = DateTime()

    @classmethod
    def create(cls, country_id, name):
        county = cls(country_id=country_id, name=name, created_at=datetime.now(UTC))
        county.raise_(CountyCreated(county_id=str(county.id), country_id=str(country_id), name=name))
        return county


@storefront.aggregate
class City:
    county_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    delivery_fee = Float(default=0.0, min_value=0.0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, county_id, name, delivery_fee=0.0):
        now = datetime.now(UTC)
        city = cls(
            county_id=county_id,
            name=name,
            delivery_fee=delivery_fee,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        city.raise_(
            CityCreated(
                city_id=str(city.id),
                county_id=str(county_id),
                name=name,
                delivery_fee=delivery_fee,
            )
        )
        return city

    def update(self, delivery_fee=None, is_active=None):
        if delivery_fee is not None:
            self.delivery_fee = delivery_fee
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CityUpdated(
                city_id=str(self.id),
                delivery_fee=self.delivery_fee,
                is_active=self.is_active,
            )
        )


def deliverable_city(city_id):
    """The city an order ships to; unknown or inactive cities are rejected."""
    try:
        city = current_domain.repository_for(City).get(city_id)
    except ObjectNotFoundError:
        raise ValidationError({"city_id": [f"City {city_id} not found"]}) from None

    if not city.is_active:
        raise ValidationError({"city_id": [f"Delivery to {city.name} is not available"]})

    return city
