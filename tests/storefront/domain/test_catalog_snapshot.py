"""Tests for frozen catalog snapshots."""

import dataclasses

import pytest
from storefront.catalog.product import Product
from storefront.catalog.snapshot import CatalogSnapshot, ProductView

from tests.storefront.factories import product_payload


class TestProductView:
    def test_view_of_product(self):
        product = Product.create(**product_payload(sizes=[{"size": "L", "stock": 1}, {"size": "S", "stock": 4}]))
        view = ProductView.of(product)
        assert view.id == str(product.id)
        assert view.image == "https://cdn.example.com/tee-front.png"
        assert view.stock == {"S": 4, "L": 1}
        assert view.sizes == ["S", "L"]

    def test_view_is_frozen(self):
        view = ProductView(id="p1", name="Tee", price=10.0, stock={"M": 1})
        with pytest.raises(dataclasses.FrozenInstanceError):
            view.price = 1.0

    def test_view_does_not_follow_later_changes(self):
        product = Product.create(**product_payload())
        view = ProductView.of(product)
        product.decrement_stock("M", 5)
        assert view.stock_for("M") == 5


class TestCatalogSnapshot:
    def test_stock_lookup(self):
        snapshot = CatalogSnapshot.of([ProductView(id="p1", name="Tee", price=10.0, stock={"M": 2})])
        assert len(snapshot) == 1
        assert snapshot.stock_for("p1", "M") == 2
        assert snapshot.stock_for("p1", "L") is None
        assert snapshot.stock_for("p2", "M") is None
