"""Storefront bounded context: carts, checkout, orders and payment reconciliation.

Handles the shopping cart, customer address book, vouchers, the catalogue and
location lookups checkout depends on, order placement with a frozen pricing
snapshot, payment confirmation, and the customer-facing fulfillment timeline.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_dir="logs", log_file_prefix="storefront")

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
