"""Reconciled cart views.

Loads a shopper's stored cart and a fresh catalog snapshot and runs them
through the reconciler. Called every time a cart is shown or changed, which
is what keeps carts fresh against stock changes made elsewhere.
"""

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.reconciler import ReconciledCart, reconcile
from storefront.catalog.snapshot import CatalogSnapshot, load_catalog_snapshot


def view_cart(user_id, snapshot: CatalogSnapshot | None = None) -> tuple[ReconciledCart, CatalogSnapshot]:
    """Return the shopper's reconciled cart and the snapshot it was checked against."""
    snapshot = snapshot if snapshot is not None else load_catalog_snapshot()
    cart = current_domain.repository_for(ShoppingCart).for_user(user_id)
    lines = cart.lines() if cart is not None else []
    return reconcile(lines, snapshot), snapshot
