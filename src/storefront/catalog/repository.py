"""Repository for the Product aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.catalog.product import Product
from storefront.domain import storefront


@storefront.repository(part_of=Product)
class ProductRepository:
    """Product lookups used by the catalog snapshot, the ledger and the API."""

    def find(self, product_id) -> Product | None:
        """Return the product, or None when it does not exist."""
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            return None

    def list_all(self) -> list[Product]:
        """All products, oldest first."""
        products = self._dao.query.limit(None).all().items
        return sorted(products, key=lambda p: (p.created_at is None, p.created_at))
