"""Structured logging helpers."""

from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    company_id: str | None = None,
    quote_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Return a log context dict with empty fields dropped.

    Only identifiers go in here, never emails or free-text reasons.
    """
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if company_id:
        context["company_id"] = company_id
    if quote_id:
        context["quote_id"] = quote_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    for key, value in extra.items():
        if value is not None and value != "":
            context[key] = value
    return context
