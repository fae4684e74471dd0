"""Cart Reconciler — keeps a shopper's cart honest against a catalog snapshot.

``reconcile`` is a pure function of ``(cart lines, snapshot)``: it reads no
storage, mutates nothing and is idempotent, so it can be run on every cart
change, every catalog refresh and every time a session regains focus.

Per line:
    size missing or stock 0  -> kept, ``valid=False``, reason "Out of stock"
    stock < quantity         -> quantity clamped to stock, ``valid=True``
    otherwise                -> unchanged, ``valid=True``

Lines with a quantity of zero or less are dropped; repeated
``(product_id, size)`` keys are merged into the first occurrence.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace

from storefront.catalog.snapshot import CatalogSnapshot

OUT_OF_STOCK = "Out of stock"


@dataclass(frozen=True)
class CartLine:
    """One ``(product, size)`` entry of a cart and its reconciled state."""

    product_id: str
    size: str
    quantity: int
    valid: bool = True
    reason: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (str(self.product_id), self.size)

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        return cls(product_id=str(data["product_id"]), size=data["size"], quantity=int(data["quantity"]))

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "size": self.size,
            "quantity": self.quantity,
            "valid": self.valid,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ReconciledCart:
    """Result of a reconciliation pass, iterable as cart lines."""

    lines: tuple[CartLine, ...] = ()
    changed: bool = field(default=False, compare=False)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def valid_lines(self) -> list[CartLine]:
        return [line for line in self.lines if line.valid]

    @property
    def invalid_lines(self) -> list[CartLine]:
        return [line for line in self.lines if not line.valid]

    @property
    def is_purchasable(self) -> bool:
        return bool(self.valid_lines)

    def subtotal(self, snapshot: CatalogSnapshot) -> float:
        """Sum of price × quantity over the purchasable lines."""
        total = 0.0
        for line in self.valid_lines:
            view = snapshot.get(line.product_id)
            if view is not None:
                total += view.price * line.quantity
        return total


def _coalesce(lines: Iterable[CartLine]) -> list[CartLine]:
    merged: dict[tuple[str, str], CartLine] = {}
    for line in lines:
        if line.quantity <= 0:
            continue
        existing = merged.get(line.key)
        if existing is None:
            merged[line.key] = line
        else:
            merged[line.key] = replace(existing, quantity=existing.quantity + line.quantity)
    return list(merged.values())


def reconcile_line(line: CartLine, snapshot: CatalogSnapshot) -> CartLine:
    stock = snapshot.stock_for(line.product_id, line.size)

    if not stock:
        return replace(line, valid=False, reason=OUT_OF_STOCK)

    if stock < line.quantity:
        return replace(line, quantity=stock, valid=True, reason=None)

    return replace(line, valid=True, reason=None)


def reconcile(lines: Iterable[CartLine], snapshot: CatalogSnapshot) -> ReconciledCart:
    """Recompute validity and quantity of every cart line against ``snapshot``."""
    incoming = list(lines)
    reconciled = tuple(reconcile_line(line, snapshot) for line in _coalesce(incoming))
    return ReconciledCart(lines=reconciled, changed=reconciled != tuple(incoming))
