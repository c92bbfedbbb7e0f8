"""Exceptions raised by backend clients and ticketing validation."""

from typing import Optional


class BackendError(Exception):
    """A remote airline/ticketing backend failed or answered non-2xx."""

    def __init__(self, backend: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{backend}: {message}")
        self.backend = backend
        self.message = message
        self.status_code = status_code


class ValidationError(ValueError):
    """Operator input rejected before any network call."""
