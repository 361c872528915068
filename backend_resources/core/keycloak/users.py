"""Keycloak user administration operations."""
from __future__ import annotations
import logging
from typing import Optional, List

import requests

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing Keycloak users.

    This is the only surface the HTTP facade talks to, so tests can swap it
    for a ``Mock(spec=UserService)``.
    """

    def __init__(self, client: KeycloakClient):
        """Initialize user service.

        Args:
            client: Keycloak client with credentials configured
        """
        self.client = client

    def create_user(self, realm: str, representation: dict) -> requests.Response:
        """Create a user from a Keycloak user representation.

        Args:
            realm: Realm name
            representation: User representation (username, email, credentials, ...)

        Returns:
            Raw response; Keycloak answers 201 with a Location header on success

        Raises:
            KeycloakAPIError: On HTTP error (e.g. 409 when the user already exists)
        """
        resp = self.client.post(f"/admin/realms/{realm}/users", json=representation)
        logger.info("Create user '%s' in realm '%s' -> %s", representation.get("username"), realm, resp.status_code)
        return resp

    def get_user(self, realm: str, user_id: str) -> dict:
        """Return the user representation for an id.

        Raises:
            UserNotFoundError: If no user has this id
            KeycloakAPIError: On any other HTTP error
        """
        try:
            resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}")
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(f"User '{user_id}' not found in realm '{realm}'") from exc
            raise
        return resp.json()

    def get_user_roles(self, realm: str, user_id: str) -> List[dict]:
        """Return the realm-level role mappings of a user."""
        resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}/role-mappings/realm")
        return resp.json() or []

    def get_user_groups(self, realm: str, user_id: str) -> List[dict]:
        """Return the groups a user is a direct member of."""
        resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}/groups")
        return resp.json() or []


def user_id_from_location(resp: requests.Response) -> Optional[str]:
    """Extract the new user id from a create response Location header."""
    location = (resp.headers or {}).get("Location") or ""
    if not location:
        return None
    return location.rstrip("/").rsplit("/", 1)[-1] or None
