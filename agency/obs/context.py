"""Request context helpers using ContextVars.

Carries the request id and the staff member driving the request so every
log line emitted while serving it can be correlated.
"""

from contextvars import ContextVar
from typing import Optional


# Public ContextVars (names are stable API)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
staff_id_var: ContextVar[Optional[str]] = ContextVar("staff_id", default=None)


def clear_context() -> None:
    """Reset context variables to defaults."""
    request_id_var.set(None)
    staff_id_var.set(None)
