"""Structured logging helpers (PII-safe)."""

import logging
from typing import Any
from uuid import UUID


def build_log_context(
    *,
    tenant_id: UUID | str | None = None,
    user_id: UUID | str | None = None,
    appointment_id: UUID | str | None = None,
    staff_id: UUID | str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict.

    Only identifiers are accepted; names, emails and notes never reach the logs.
    """
    context: dict[str, Any] = {}
    if tenant_id:
        context["tenant_id"] = str(tenant_id)
    if user_id:
        context["user_id"] = str(user_id)
    if appointment_id:
        context["appointment_id"] = str(appointment_id)
    if staff_id:
        context["staff_id"] = str(staff_id)
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context


def configure_logging(level: str) -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
