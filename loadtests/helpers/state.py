"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across users.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for a single simulated shopper."""

    user_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    cart_lines: list[dict] = field(default_factory=list)
    order_ids: list[str] = field(default_factory=list)


@dataclass
class ContentionState:
    """Tracks the scarce product every contention user races for."""

    product_id: str | None = None
    units: int = 0
    placed: int = 0
    rejected: int = 0
