"""Shared BDD fixtures and step definitions for checkout and payment scenarios."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.cart import cart_for_customer
from storefront.catalogue.management import AdjustStock
from storefront.order.order import Order
from storefront.order.repository import load_order
from storefront.order.timeline import StageStatus, project_timeline

CUSTOMER_ID = "cust-001"


@pytest.fixture()
def catalogue():
    """Product ids by name, filled in by the catalogue steps."""
    return {}


@pytest.fixture()
def error():
    """Container for the exception a When step ran into."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the customer ships to their saved address in Westlands")
def _(address_id):
    return address_id


@given(parsers.cfparse('the catalogue lists "{name}" at {price:f} with {stock:d} in stock'))
def _(catalogue, make_product, name, price, stock):
    catalogue[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the cart holds {quantity:d} "{name}"'))
def _(catalogue, add_to_cart, quantity, name):
    add_to_cart(catalogue[name], quantity=quantity)


@given(parsers.cfparse('the stock of "{name}" drops by {amount:d}'))
def _(catalogue, name, amount):
    current_domain.process(AdjustStock(product_id=catalogue[name], quantity_change=-amount), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is "{status}" with payment "{payment}"'))
def _(order_number, status, payment):
    order = load_order(order_number)
    assert order.status == status
    assert order.payment.status == payment


@then(parsers.cfparse("the order total is {total:f}"))
def _(order_number, total):
    assert load_order(order_number).pricing.total == pytest.approx(total)


@then(parsers.cfparse("the order discount is {discount:f}"))
def _(order_number, discount):
    assert load_order(order_number).pricing.discount == pytest.approx(discount)


@then("the cart is empty")
def _():
    assert cart_for_customer(CUSTOMER_ID).is_empty


@then("the cart is not empty")
def _():
    assert not cart_for_customer(CUSTOMER_ID).is_empty


@then(parsers.cfparse('the timeline shows "{stage_key}" as the current stage'))
def _(order_number, stage_key):
    order = load_order(order_number)
    stages = project_timeline(order.status, order.ordered_timeline)
    current = [stage.key for stage in stages if stage.status == StageStatus.CURRENT]
    assert current == [stage_key]


@then("no order is placed")
def _():
    assert current_domain.repository_for(Order).for_customer(CUSTOMER_ID) == []
