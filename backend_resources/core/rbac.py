"""Role-Based Access Control helpers."""
from __future__ import annotations


def _role_names(access) -> list[str]:
    if not isinstance(access, dict):
        return []
    roles = access.get("roles")
    if not isinstance(roles, list):
        return []
    return [r for r in roles if isinstance(r, str)]


def collect_roles(*sources) -> list[str]:
    """Collect all roles from realm_access and resource_access claims.

    Entries that are not strings are skipped.
    """
    roles = []
    for source in sources:
        if not isinstance(source, dict):
            continue
        candidates = _role_names(source.get("realm_access"))
        resource_access = source.get("resource_access")
        if isinstance(resource_access, dict):
            for client_access in resource_access.values():
                candidates.extend(_role_names(client_access))
        for role in candidates:
            if role not in roles:
                roles.append(role)
    return roles


def _normalize_role(role: str) -> str:
    role = role.strip().lower()
    if role.startswith("role_"):
        role = role[len("role_"):]
    return role


def has_role(roles: list[str], required_role: str) -> bool:
    """Check role membership case-insensitively, ignoring a ``ROLE_`` prefix."""
    wanted = _normalize_role(required_role)
    return any(isinstance(role, str) and _normalize_role(role) == wanted for role in roles)


def principal_name(claims: dict) -> str:
    """Best display name for the token subject."""
    for key in ("preferred_username", "email", "azp", "sub"):
        value = claims.get(key)
        if isinstance(value, str) and value:
            return value
    return ""
