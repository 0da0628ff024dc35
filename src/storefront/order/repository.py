"""Order lookups by the identifiers customers and gateways actually hold."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import OrderNotFoundError
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_order_number(self, order_number):
        """The order carrying this human-readable number, or None."""
        matches = self._dao.query.filter(order_number=order_number).all().items
        if not matches:
            return None
        return self.get(matches[0].id)

    def for_customer(self, customer_id):
        """A customer's orders, newest first."""
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return sorted(orders, key=lambda o: o.created_at, reverse=True)


def load_order(order_number):
    """Fetch an order by number, or by internal id as a fallback."""
    repo = current_domain.repository_for(Order)
    order = repo.find_by_order_number(order_number)
    if order is not None:
        return order
    try:
        return repo.get(order_number)
    except ObjectNotFoundError:
        raise OrderNotFoundError(order_number) from None
