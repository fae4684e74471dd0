"""Response error extraction for load test observability.

Turns Storefront API error bodies into short, readable messages:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- Storefront errors: {"error": "msg", "error_type": "InsufficientStock"}
- Field validation (400): {"error": {"field": ["msg", ...]}, "error_type": "ValidationError"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _join(messages) -> str:
    if isinstance(messages, (list, tuple)):
        return "; ".join(str(m) for m in messages)
    return str(messages)


def error_type(response: Response) -> str | None:
    """The ``error_type`` of a storefront error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error_type") if isinstance(body, dict) else None


def extract_error_detail(response: Response) -> str:
    """Extract a compact, human-readable message from an API error response."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            message = " | ".join(f"{field}: {_join(msgs)}" for field, msgs in error.items())
        else:
            message = str(error)
        kind = body.get("error_type")
        return f"{kind}: {message}" if kind else message

    return str(body)[:300]
