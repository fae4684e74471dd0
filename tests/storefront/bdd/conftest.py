"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then
from storefront.catalog import operations as catalog
from storefront.catalog.product import Product

from tests.storefront.factories import product_payload


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def context():
    """Mutable scratchpad shared by the steps of one scenario."""
    return {}


def _parse_stock(listing):
    sizes = []
    for pair in listing.split(","):
        size, stock = pair.strip().split("=")
        sizes.append({"size": size, "stock": int(stock)})
    return sizes


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a product "{name}" with stock {stock}'),
    target_fixture="product_id",
)
def product_with_stock(name, stock):
    return catalog.add_product(**product_payload(name=name, sizes=_parse_stock(stock)))


@given("the product is removed from the catalog")
def product_removed(product_id):
    catalog.remove_product(product_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the stock of size "{size}" is {stock:d}'))
def stock_is(product_id, size, stock):
    assert current_domain.repository_for(Product).get(product_id).stock_for(size) == stock
