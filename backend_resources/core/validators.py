"""Input validation helpers for user data."""
from __future__ import annotations
import re

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")


def validate_required(value: str | None, field: str) -> str:
    """Validate that a text field is present and not blank.

    Args:
        value: Raw input (may be None)
        field: Field label for error messages (e.g., "Name")

    Returns:
        Trimmed value

    Raises:
        ValueError: If value is missing or blank
    """
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value


def validate_email(email: str | None) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Trimmed email address

    Raises:
        ValueError: If email is invalid
    """
    email = (email or "").strip()
    if len(email) > 254 or not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email
