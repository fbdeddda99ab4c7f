"""Structured logging helpers (customer-data-safe)."""

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_log_context(
    *,
    operator: str | None = None,
    thread_id: str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """
    Return a log context dict for ``extra=``.

    Only operator identity and opaque identifiers; never message text or
    customer contact details.
    """
    context: dict[str, Any] = {}
    if operator:
        context["operator"] = operator
    if thread_id:
        context["thread_id"] = thread_id
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
