"""Response error extraction for load test observability.

Parses Groupbuy API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Group order errors: {"error": "Full", "message": "Order is full", ...}
- Other domain errors: {"error": {"field": "msg"}} or {"detail": "msg"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message from an API error response."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        if "message" in body:
            return f"{error}: {body['message']}"
        return str(error)

    if "detail" in body:
        return str(body["detail"])

    return str(body)[:300]


def error_kind(response: Response) -> str | None:
    """The ``error`` kind of a group order error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    kind = body.get("error") if isinstance(body, dict) else None
    return kind if isinstance(kind, str) else None
