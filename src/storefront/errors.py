"""Storefront error taxonomy.

Malformed input is rejected with Protean's ``ValidationError`` before any
mutation. The errors below describe failures that depend on stored state;
each carries a ``reason`` suitable for showing to a shopper or operator.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class NotFound(StorefrontError):
    """Raised when a product or order does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class StockDecrementFailed(NotFound):
    """Raised when an order's stock could not be decremented.

    The product (or its size entry) disappeared between validation and the
    decrement, so the placement is aborted rather than left half-applied.
    """

    def __init__(self, product_id: str, size: str, outcome: str):
        self.product_id = product_id
        self.size = size
        self.outcome = outcome
        kind = "Product" if outcome == "Product_Not_Found" else "Size"
        identifier = product_id if kind == "Product" else f"{product_id}/{size}"
        super().__init__(kind, identifier)


class InsufficientStock(StorefrontError):
    """Raised when a cart line asks for more units than a size has."""

    def __init__(self, product_id: str, size: str, requested: int, available: int, name: str | None = None):
        self.product_id = product_id
        self.size = size
        self.requested = requested
        self.available = available
        label = name or product_id
        super().__init__(f"Stock not available for {label} - {size}")


class TransactionConflict(StorefrontError):
    """Raised when a concurrent write prevented an atomic commit.

    Nothing from the failed operation is persisted; the caller may retry the
    whole operation.
    """

    def __init__(self, reason: str = "The order could not be placed because stock changed, please try again"):
        super().__init__(reason)


class NotAuthorized(StorefrontError):
    """Raised when an operator-only action is requested without a valid token."""

    def __init__(self, reason: str = "Not Authorized! Login Again"):
        super().__init__(reason)
