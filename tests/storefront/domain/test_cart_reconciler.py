"""Tests for cart reconciliation against catalog snapshots."""

from storefront.cart.reconciler import OUT_OF_STOCK, CartLine, ReconciledCart, reconcile, reconcile_line
from storefront.catalog.snapshot import CatalogSnapshot, ProductView


def _snapshot(**stock_by_product):
    return CatalogSnapshot.of(
        ProductView(id=product_id, name=f"Product {product_id}", price=10.0, stock=stock)
        for product_id, stock in stock_by_product.items()
    )


class TestReconcileLine:
    def test_line_within_stock_is_unchanged(self):
        line = reconcile_line(CartLine("p1", "M", 2), _snapshot(p1={"M": 5}))
        assert line == CartLine("p1", "M", 2, valid=True, reason=None)

    def test_quantity_is_clamped_to_stock(self):
        line = reconcile_line(CartLine("p1", "M", 5), _snapshot(p1={"M": 3}))
        assert line.quantity == 3
        assert line.valid

    def test_zero_stock_marks_line_out_of_stock(self):
        line = reconcile_line(CartLine("p1", "M", 2), _snapshot(p1={"M": 0}))
        assert not line.valid
        assert line.reason == OUT_OF_STOCK
        assert line.quantity == 2

    def test_unlisted_size_is_out_of_stock(self):
        line = reconcile_line(CartLine("p1", "XL", 1), _snapshot(p1={"M": 4}))
        assert not line.valid
        assert line.reason == OUT_OF_STOCK

    def test_missing_product_is_out_of_stock(self):
        line = reconcile_line(CartLine("gone", "M", 1), _snapshot(p1={"M": 4}))
        assert not line.valid

    def test_restocked_line_becomes_valid_again(self):
        stale = CartLine("p1", "M", 2, valid=False, reason=OUT_OF_STOCK)
        line = reconcile_line(stale, _snapshot(p1={"M": 9}))
        assert line.valid
        assert line.reason is None


class TestReconcile:
    def test_reconcile_is_idempotent(self):
        snapshot = _snapshot(p1={"M": 3, "L": 0}, p2={"S": 1})
        lines = [CartLine("p1", "M", 5), CartLine("p1", "L", 1), CartLine("p2", "S", 1), CartLine("p3", "M", 1)]

        once = reconcile(lines, snapshot)
        twice = reconcile(once, snapshot)

        assert twice == once
        assert once.changed
        assert not twice.changed

    def test_lines_with_no_quantity_are_dropped(self):
        cart = reconcile([CartLine("p1", "M", 0), CartLine("p1", "L", 1)], _snapshot(p1={"M": 3, "L": 3}))
        assert [line.key for line in cart] == [("p1", "L")]

    def test_duplicate_keys_are_merged(self):
        cart = reconcile([CartLine("p1", "M", 1), CartLine("p1", "M", 2)], _snapshot(p1={"M": 10}))
        assert len(cart) == 1
        assert cart.lines[0].quantity == 3

    def test_merged_quantity_is_clamped(self):
        cart = reconcile([CartLine("p1", "M", 2), CartLine("p1", "M", 2)], _snapshot(p1={"M": 3}))
        assert cart.lines[0].quantity == 3

    def test_order_of_lines_is_kept(self):
        snapshot = _snapshot(p1={"M": 3}, p2={"M": 3})
        cart = reconcile([CartLine("p2", "M", 1), CartLine("p1", "M", 1)], snapshot)
        assert [line.product_id for line in cart] == ["p2", "p1"]

    def test_unchanged_cart_reports_no_change(self):
        lines = [CartLine("p1", "M", 1)]
        assert not reconcile(lines, _snapshot(p1={"M": 3})).changed

    def test_empty_cart(self):
        cart = reconcile([], _snapshot(p1={"M": 3}))
        assert len(cart) == 0
        assert not cart.is_purchasable

    def test_valid_and_invalid_lines(self):
        cart = reconcile([CartLine("p1", "M", 1), CartLine("p1", "L", 1)], _snapshot(p1={"M": 3, "L": 0}))
        assert [line.size for line in cart.valid_lines] == ["M"]
        assert [line.size for line in cart.invalid_lines] == ["L"]
        assert cart.is_purchasable

    def test_subtotal_counts_only_valid_lines(self):
        snapshot = _snapshot(p1={"M": 3, "L": 0})
        cart = reconcile([CartLine("p1", "M", 2), CartLine("p1", "L", 4)], snapshot)
        assert cart.subtotal(snapshot) == 20.0


class TestCartLine:
    def test_from_dict(self):
        line = CartLine.from_dict({"product_id": 7, "size": "M", "quantity": "2"})
        assert line == CartLine("7", "M", 2)

    def test_changed_flag_does_not_affect_equality(self):
        assert ReconciledCart((CartLine("p1", "M", 1),), changed=True) == ReconciledCart((CartLine("p1", "M", 1),))
