"""Errors raised by the user-management facade."""
from __future__ import annotations


class BackendResourcesError(Exception):
    """Provider failure surfaced to the HTTP layer with a status code."""

    def __init__(self, message: str, status: int = 500):
        self.message = message
        self.status = status
        super().__init__(message)


class ValidationError(Exception):
    """Invalid request payload.

    Attributes:
        errors: Mapping of field name to human-readable message
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__(", ".join(f"{field}: {msg}" for field, msg in self.errors.items()))
