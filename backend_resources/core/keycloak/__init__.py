"""Keycloak Admin API client library.

Architecture:
- client.py: HTTP client with service account authentication and auto-refresh
- users.py: User administration (create, lookup, role and group listing)
- exceptions.py: Typed exceptions for error handling

Usage:
    from backend_resources.core.keycloak import KeycloakClient, UserService

    client = KeycloakClient("http://keycloak:8080")
    client.use_service_account("itm", "backend-resources", "secret")

    users = UserService(client)
    rep = users.get_user("itm", "3f1c...")
"""
from .client import KeycloakClient, REQUEST_TIMEOUT
from .exceptions import KeycloakError, KeycloakAPIError, UserNotFoundError
from .users import UserService, user_id_from_location

__all__ = [
    # Client
    "KeycloakClient",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "UserNotFoundError",

    # Services
    "UserService",
    "user_id_from_location",
]
