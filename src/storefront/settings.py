"""Storefront settings read from the environment.

Protean's own configuration (providers, brokers, event store) is selected by
``PROTEAN_ENV``; these are the business knobs that sit beside it.
"""

import os

DEFAULT_DELIVERY_FEE = 10.0
DEFAULT_CURRENCY = "USD"


def delivery_fee() -> float:
    """Flat delivery fee added to every order amount."""
    return float(os.getenv("STOREFRONT_DELIVERY_FEE", DEFAULT_DELIVERY_FEE))


def currency() -> str:
    """Currency code shown beside every cart and order amount."""
    return os.getenv("STOREFRONT_CURRENCY", DEFAULT_CURRENCY)


def admin_token() -> str | None:
    """Bearer token that identifies the store operator, if configured."""
    return os.getenv("STOREFRONT_ADMIN_TOKEN") or None
