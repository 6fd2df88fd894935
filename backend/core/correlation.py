"""
Request correlation IDs.

Every request gets a short ID that is attached to log records, Sentry events
and error responses so a citizen can quote it when reporting a problem.
"""

import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return an 8-character hex ID, e.g. ``"4f1c09ab"``."""
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Correlation ID of the current request, or ``""`` outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def resolve_correlation_id(incoming: str | None) -> str:
    """
    Pick the correlation ID for a request.

    A client-supplied value is reused when it looks sane (short, no
    whitespace) so traces can be joined with frontend logs; anything else
    gets a fresh ID.

    Args:
        incoming: Value of the correlation header, if any.

    Returns:
        The ID to use for this request.
    """
    if incoming and len(incoming) <= 64 and not any(c.isspace() for c in incoming):
        return incoming
    return generate_correlation_id()
