import pytest
from protean.integrations.pytest import DomainFixture

from tests.storefront.factories import address_payload, product_payload


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_bed):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Push domain context before each test, cleanup after."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def _default_settings(monkeypatch):
    monkeypatch.delenv("STOREFRONT_ADMIN_TOKEN", raising=False)
    monkeypatch.delenv("STOREFRONT_DELIVERY_FEE", raising=False)
    monkeypatch.delenv("STOREFRONT_CURRENCY", raising=False)


@pytest.fixture()
def make_product():
    """Persist a product through the catalog and return its id."""
    from storefront.catalog.operations import add_product

    def _make(**overrides):
        return add_product(**product_payload(**overrides))

    return _make


@pytest.fixture()
def address():
    return address_payload()


@pytest.fixture()
def stock_of():
    """Read a size's current stock straight from the repository."""
    from protean.utils.globals import current_domain
    from storefront.catalog.product import Product

    def _stock(product_id, size):
        return current_domain.repository_for(Product).get(product_id).stock_for(size)

    return _stock
