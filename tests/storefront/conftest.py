"""Shared fixtures for storefront tests: catalogue, locations, addresses and carts."""

import json

import pytest
from protean import current_domain
from storefront.address.book import AddAddress
from storefront.cart.management import AddToCart, CreateCart
from storefront.catalogue.management import AddProductVariant, CreateProduct
from storefront.checkout.placement import PlaceOrder
from storefront.location.management import CreateCity, CreateCountry, CreateCounty
from storefront.payment.gateway import set_gateway
from storefront.payment.gateway.fake_adapter import FakeGateway

CUSTOMER_ID = "cust-001"
CUSTOMER_EMAIL = "wanjiru@example.com"


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def customer_id():
    return CUSTOMER_ID


@pytest.fixture()
def location():
    """Kenya → Nairobi County → Westlands (delivery fee 200)."""
    country_id = process(CreateCountry(name="Kenya", code="KE"))
    county_id = process(CreateCounty(country_id=country_id, name="Nairobi"))
    city_id = process(CreateCity(county_id=county_id, name="Westlands", delivery_fee=200.0))
    pickup_city_id = process(CreateCity(county_id=county_id, name="CBD Pickup", delivery_fee=0.0))
    return {
        "country_id": country_id,
        "county_id": county_id,
        "city_id": city_id,
        "pickup_city_id": pickup_city_id,
    }


@pytest.fixture()
def make_product():
    def _make(name="Linen Shirt", price=1000.0, stock=5, slug=None):
        return process(CreateProduct(name=name, slug=slug or name.lower().replace(" ", "-"), price=price, stock=stock))

    return _make


@pytest.fixture()
def product_id(make_product):
    return make_product()


@pytest.fixture()
def variant(make_product):
    """A dress sold in sizes; size M costs 1500 with 2 in stock."""
    product_id = make_product(name="Wrap Dress", price=1400.0, stock=0)
    variant_id = process(
        AddProductVariant(
            product_id=product_id,
            price=1500.0,
            stock=2,
            options=json.dumps({"Size": "M"}),
            sku="WRAP-M",
        )
    )
    return {"product_id": product_id, "variant_id": variant_id}


@pytest.fixture()
def make_address(location):
    def _make(customer_id=CUSTOMER_ID, is_default=False, city_id=None, recipient_name="Wanjiru Kamau"):
        return process(
            AddAddress(
                customer_id=customer_id,
                recipient_name=recipient_name,
                phone="+254700000001",
                street_address="12 Parklands Road",
                country_id=location["country_id"],
                county_id=location["county_id"],
                city_id=city_id or location["city_id"],
                is_default=is_default,
            )
        )

    return _make


@pytest.fixture()
def address_id(make_address):
    return make_address()


@pytest.fixture()
def cart_id():
    return process(CreateCart(customer_id=CUSTOMER_ID))


@pytest.fixture()
def add_to_cart(cart_id):
    def _add(product_id, quantity=1, variant_id=None):
        return process(AddToCart(cart_id=cart_id, product_id=product_id, variant_id=variant_id, quantity=quantity))

    return _add


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def place_order(address_id):
    """Place an order for CUSTOMER_ID's cart, shipping to the default address."""
    def _place(payment_method="paystack", voucher_code=None, **overrides):
        fields = {
            "customer_id": CUSTOMER_ID,
            "customer_email": CUSTOMER_EMAIL,
            "address_id": address_id,
            "payment_method": payment_method,
            "voucher_code": voucher_code,
        }
        fields.update(overrides)
        return process(PlaceOrder(**fields))

    return _place
