"""Location administration: commands and handlers for countries, counties and cities."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ConflictError
from storefront.location.location import City, Country, County


@storefront.command(part_of="Country")
class CreateCountry:
    name = String(required=True, max_length=100)
    code = String(max_length=3)


@storefront.command(part_of="County")
class CreateCounty:
    country_id = Identifier(required=True)
    name = String(required=True, max_length=100)


@storefront.command(part_of="City")
class CreateCity:
    county_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    delivery_fee = Float(default=0.0, min_value=0.0)


@storefront.command(part_of="City")
class UpdateCity:
    city_id = Identifier(required=True)
    delivery_fee = Float(min_value=0.0)
    is_active = Boolean()


@storefront.command_handler(part_of=Country)
class ManageCountryHandler:
    @handle(CreateCountry)
    def create_country(self, command):
        country = Country.create(name=command.name, code=command.code)
        current_domain.repository_for(Country).add(country)
        return str(country.id)


@storefront.command_handler(part_of=County)
class ManageCountyHandler:
    @handle(CreateCounty)
    def create_county(self, command):
        # Raises ObjectNotFoundError for an unknown parent
        current_domain.repository_for(Country).get(command.country_id)

        county = County.create(country_id=command.country_id, name=command.name)
        current_domain.repository_for(County).add(county)
        return str(county.id)


@storefront.command_handler(part_of=City)
class ManageCityHandler:
    @handle(CreateCity)
    def create_city(self, command):
        current_domain.repository_for(County).get(command.county_id)

        repo = current_domain.repository_for(City)
        siblings = repo._dao.query.filter(county_id=str(command.county_id)).all().items
        if any(c.name.lower() == command.name.lower() for c in siblings):
            raise ConflictError({"name": [f"City {command.name} already exists in this county"]})

        city = City.create(
            county_id=command.county_id,
            name=command.name,
            delivery_fee=command.delivery_fee,
        )
        repo.add(city)
        return str(city.id)

    @handle(UpdateCity)
    def update_city(self, command):
        repo = current_domain.repository_for(City)
        city = repo.get(command.city_id)
        city.update(delivery_fee=command.delivery_fee, is_active=command.is_active)
        repo.add(city)
