"""Domain events for the delivery location aggregates."""

from protean.fields import Boolean, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Country")
class CountryCreated:
    __version__ = 1

    country_id = Identifier(required=True)
    name = String(required=True, max_length=100)


@storefront.event(part_of="County")
class CountyCreated:
    __version__ = 1

    county_id = Identifier(required=True)
    country_id = Identifier(required=True)
    name = String(required=True, max_length=100)


@storefront.event(part_of="City")
class CityCreated:
    __version__ = 1

    city_id = Identifier(required=True)
    county_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    delivery_fee = Float(required=True)


@storefront.event(part_of="City")
class CityUpdated:
    """Delivery fee or availability of a city changed."""

    __version__ = 1

    city_id = Identifier(required=True)
    delivery_fee = Float(required=True)
    is_active = Boolean(required=True)
