"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order


def _newest_first(orders):
    return sorted(orders, key=lambda o: o.placed_at, reverse=True)


@storefront.repository(part_of=Order)
class OrderRepository:
    def list_all(self) -> list[Order]:
        """Every order, newest first (operator view)."""
        return _newest_first(self._dao.query.limit(None).all().items)

    def for_user(self, user_id) -> list[Order]:
        """One shopper's orders, newest first."""
        return _newest_first(self._dao.query.filter(user_id=str(user_id)).limit(None).all().items)
