"""Read-only catalog snapshots.

A snapshot is a frozen copy of what the catalog looked like when it was read:
products keyed by id, each with a size → stock mapping. The cart reconciler
works purely on snapshots; the order placer never trusts one handed to it and
loads its own under lock.
"""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from storefront.catalog.product import Product, size_sort_key


@dataclass(frozen=True)
class ProductView:
    """Frozen view of one product's purchasable state."""

    id: str
    name: str
    price: float
    image: str | None = None
    stock: dict[str, int] = field(default_factory=dict)

    @classmethod
    def of(cls, product: Product) -> "ProductView":
        return cls(
            id=str(product.id),
            name=product.name,
            price=product.price,
            image=product.primary_image,
            stock={s.size: s.stock for s in product.ordered_sizes},
        )

    @property
    def sizes(self) -> list[str]:
        return sorted(self.stock, key=size_sort_key)

    def stock_for(self, size: str) -> int | None:
        return self.stock.get(size)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Products by id, as read at one point in time."""

    products: dict[str, ProductView] = field(default_factory=dict)

    @classmethod
    def of(cls, products) -> "CatalogSnapshot":
        views = (p if isinstance(p, ProductView) else ProductView.of(p) for p in products)
        return cls(products={view.id: view for view in views})

    def get(self, product_id) -> ProductView | None:
        return self.products.get(str(product_id))

    def stock_for(self, product_id, size) -> int | None:
        """Stock for ``(product_id, size)``, or None when either is unknown."""
        view = self.get(product_id)
        return view.stock_for(size) if view is not None else None

    def __len__(self) -> int:
        return len(self.products)


def load_catalog_snapshot() -> CatalogSnapshot:
    """Read every product from the repository into a fresh snapshot."""
    return CatalogSnapshot.of(current_domain.repository_for(Product).list_all())
