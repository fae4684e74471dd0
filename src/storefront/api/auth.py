"""Operator authentication for catalog and order administration routes."""

from fastapi import Header

from storefront import settings
from storefront.errors import NotAuthorized


async def require_operator(authorization: str | None = Header(default=None)) -> None:
    """Reject the request unless it carries ``Authorization: Bearer <admin token>``.

    When no admin token is configured, operator routes are open.
    """
    expected = settings.admin_token()
    if expected is None:
        return

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or token.strip() != expected:
        raise NotAuthorized()
