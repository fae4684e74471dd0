"""Stock Ledger — the one place stock counters go down.

``StockLedger.decrement`` is the standalone operation: it takes the product's
row lock, then loads, floors-at-zero and commits inside a single command
handler unit of work, so concurrent decrements of the same counter are
linearized and none is lost. ``StockLedger.apply`` performs the same rule on
a product the caller has already locked and loaded inside its own
transaction (order placement).

A missing product or size is never skipped silently: the returned
``DecrementResult`` says what happened and the miss is logged.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import TransactionConflict
from storefront.stock.locks import RowLocks, row_locks

logger = structlog.get_logger(__name__)


class DecrementOutcome(Enum):
    APPLIED = "Applied"
    CLAMPED = "Clamped"  # Asked for more than was left; floored at zero
    PRODUCT_NOT_FOUND = "Product_Not_Found"
    SIZE_NOT_FOUND = "Size_Not_Found"


@dataclass(frozen=True)
class DecrementResult:
    """What a single decrement did to one stock counter."""

    product_id: str
    size: str
    requested: int
    outcome: DecrementOutcome
    previous_stock: int | None = None
    new_stock: int | None = None

    @property
    def applied(self) -> bool:
        return self.outcome in (DecrementOutcome.APPLIED, DecrementOutcome.CLAMPED)

    @property
    def clamped(self) -> bool:
        return self.outcome == DecrementOutcome.CLAMPED

    @property
    def reason(self) -> str | None:
        if self.outcome == DecrementOutcome.PRODUCT_NOT_FOUND:
            return f"Product not found: {self.product_id}"
        if self.outcome == DecrementOutcome.SIZE_NOT_FOUND:
            return f"Size {self.size} not found for product {self.product_id}"
        if self.outcome == DecrementOutcome.CLAMPED:
            return f"Only {self.previous_stock} of {self.requested} units were in stock"
        return None

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "size": self.size,
            "requested": self.requested,
            "outcome": self.outcome.value,
            "previous_stock": self.previous_stock,
            "new_stock": self.new_stock,
            "applied": self.applied,
            "reason": self.reason,
        }


def apply_decrement(product: Product | None, product_id, size, quantity) -> DecrementResult:
    """Apply the floor-at-zero rule to an already loaded product.

    ``product`` is None when the lookup found nothing. The product is mutated
    in memory only; persisting it is the caller's job.
    """
    product_id = str(product_id)
    if product is None:
        return DecrementResult(product_id, size, quantity, DecrementOutcome.PRODUCT_NOT_FOUND)

    if product.size_entry(size) is None:
        return DecrementResult(product_id, size, quantity, DecrementOutcome.SIZE_NOT_FOUND)

    previous, new = product.decrement_stock(size, quantity)
    outcome = DecrementOutcome.CLAMPED if previous < quantity else DecrementOutcome.APPLIED
    return DecrementResult(product_id, size, quantity, outcome, previous, new)


@storefront.command(part_of="Product")
class DecrementStock:
    """Take units of one size out of stock."""

    product_id = Identifier(required=True)
    size = String(required=True, max_length=3)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class DecrementStockHandler:
    @handle(DecrementStock)
    def decrement_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.find(command.product_id)

        result = apply_decrement(product, command.product_id, command.size, command.quantity)
        if result.applied:
            repo.add(product)
        return result


class StockLedger:
    """Serialized, floor-at-zero decrements of per-size stock counters."""

    def __init__(self, locks: RowLocks = row_locks):
        self._locks = locks

    def decrement(self, product_id, size, quantity) -> DecrementResult:
        command = DecrementStock(product_id=str(product_id), size=size, quantity=quantity)

        with self._locks.hold([product_id]):
            try:
                result = current_domain.process(command, asynchronous=False)
            except ExpectedVersionError as exc:
                logger.warning("stock_decrement_conflict", product_id=str(product_id), size=size)
                raise TransactionConflict("Stock changed concurrently, the decrement was not applied") from exc

        self._log(result)
        return result

    def apply(self, product: Product | None, product_id, size, quantity) -> DecrementResult:
        """Decrement a product the caller has locked and loaded in its own transaction."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        result = apply_decrement(product, product_id, size, quantity)
        self._log(result)
        return result

    @staticmethod
    def _log(result: DecrementResult) -> None:
        if not result.applied:
            logger.warning(
                "stock_decrement_not_applied",
                product_id=result.product_id,
                size=result.size,
                outcome=result.outcome.value,
            )
        elif result.clamped:
            logger.warning(
                "stock_decrement_clamped",
                product_id=result.product_id,
                size=result.size,
                requested=result.requested,
                previous_stock=result.previous_stock,
            )
        else:
            logger.info(
                "stock_decremented",
                product_id=result.product_id,
                size=result.size,
                requested=result.requested,
                new_stock=result.new_stock,
            )


stock_ledger = StockLedger()
