"""Request and response objects for the user API."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable

from backend_resources.core import validators
from backend_resources.core.exceptions import ValidationError


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class UserRequest:
    """Inbound payload for ``POST /api/users``."""
    username: str
    email: str
    password: str = ""
    first_name: str = ""
    last_name: str = ""

    @classmethod
    def from_json(cls, payload: dict) -> "UserRequest":
        """Build and validate a request from a JSON body.

        All field errors are collected before raising, so the client sees
        every problem at once.

        Raises:
            ValidationError: With a field -> message mapping
        """
        errors: dict[str, str] = {}

        username = _text(payload.get("username"))
        try:
            username = validators.validate_required(username, "Name")
        except ValueError as exc:
            errors["name"] = str(exc)

        email = _text(payload.get("email"))
        try:
            email = validators.validate_email(email)
        except ValueError as exc:
            errors["email"] = str(exc)

        if errors:
            raise ValidationError(errors)

        return cls(
            username=username,
            email=email,
            password=_text(payload.get("password")),
            first_name=_text(payload.get("firstName")).strip(),
            last_name=_text(payload.get("lastName")).strip(),
        )

    def to_representation(self) -> dict:
        """Keycloak user representation for the admin create endpoint."""
        return {
            "username": self.username,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "enabled": True,
            "credentials": [
                {"type": "password", "value": self.password, "temporary": False}
            ],
        }


@dataclass(frozen=True)
class UserResponse:
    """User details returned by ``GET /api/users/<id>``."""
    first_name: str | None
    last_name: str | None
    email: str | None
    roles: tuple[str, ...] = field(default_factory=tuple)
    groups: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_representation(
        cls,
        representation: dict,
        roles: Iterable[dict] = (),
        groups: Iterable[dict] = (),
    ) -> "UserResponse":
        """Shape Keycloak user, role and group representations, keeping their order."""
        return cls(
            first_name=representation.get("firstName"),
            last_name=representation.get("lastName"),
            email=representation.get("email"),
            roles=tuple(role["name"] for role in roles if role.get("name")),
            groups=tuple(group["name"] for group in groups if group.get("name")),
        )

    def to_dict(self) -> dict:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "roles": list(self.roles),
            "groups": list(self.groups),
        }
