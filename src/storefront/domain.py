"""Storefront bounded context — Catalog, Stock, Cart and Orders.

Products, their per-size stock counters, shopper carts and orders live in a
single domain so that order creation and the stock decrement it triggers
commit in one unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="storefront")

logger = get_logger(__name__)

storefront = Domain(name="storefront")
