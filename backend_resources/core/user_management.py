"""
User management service layer.

Maps API requests onto Keycloak admin calls for a single realm and turns
every provider failure into a ``BackendResourcesError``.

Architecture:
    /api/users ──> user_management.py ──> core.keycloak.UserService ──> Keycloak
"""
from __future__ import annotations
import logging
from typing import Optional

import requests

from backend_resources.core.exceptions import BackendResourcesError
from backend_resources.core.keycloak import (
    KeycloakAPIError,
    KeycloakError,
    UserNotFoundError,
    UserService,
    user_id_from_location,
)
from backend_resources.core.models import UserRequest, UserResponse

logger = logging.getLogger(__name__)

PROVIDER_ERRORS = (KeycloakError, requests.RequestException)


def _public_reason(exc: Exception) -> str:
    """Caller-facing summary of a provider failure; URLs and response bodies stay in the log."""
    if isinstance(exc, KeycloakAPIError):
        return f"Keycloak returned status {exc.status_code}"
    if isinstance(exc, UserNotFoundError):
        return "user not found"
    if isinstance(exc, requests.RequestException):
        return "Keycloak is unreachable"
    return "Keycloak request failed"


class UserManagementService:
    """Realm-bound facade over the Keycloak user service."""

    def __init__(self, users: UserService, realm: str):
        self.users = users
        self.realm = realm

    def create_user(self, user_request: UserRequest) -> Optional[str]:
        """Create a user and return its id when Keycloak reports one.

        Raises:
            BackendResourcesError: Keycloak rejected the user or was unreachable
        """
        representation = user_request.to_representation()
        try:
            resp = self.users.create_user(self.realm, representation)
        except PROVIDER_ERRORS as exc:
            logger.error("Failed to create user '%s': %s", user_request.username, exc)
            raise BackendResourcesError(f"Failed to create user '{user_request.username}': {_public_reason(exc)}") from exc

        if resp.status_code != 201:
            logger.error("Keycloak returned status %s creating user '%s'", resp.status_code, user_request.username)
            raise BackendResourcesError(
                f"Failed to create user '{user_request.username}': Keycloak returned status {resp.status_code}"
            )

        user_id = user_id_from_location(resp)
        logger.info("Created user '%s' (id=%s) in realm '%s'", user_request.username, user_id, self.realm)
        return user_id

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Fetch a user with its realm roles and groups.

        Raises:
            BackendResourcesError: On any lookup failure
        """
        try:
            representation = self.users.get_user(self.realm, user_id)
            roles = self.users.get_user_roles(self.realm, user_id)
            groups = self.users.get_user_groups(self.realm, user_id)
        except PROVIDER_ERRORS as exc:
            logger.error("Failed to fetch user '%s': %s", user_id, exc)
            raise BackendResourcesError(f"Failed to fetch user '{user_id}': {_public_reason(exc)}") from exc
        return UserResponse.from_representation(representation, roles, groups)

    def get_user_roles(self, user_id: str) -> list[str]:
        """Realm role names of a user, in Keycloak order."""
        try:
            roles = self.users.get_user_roles(self.realm, user_id)
        except PROVIDER_ERRORS as exc:
            logger.error("Failed to fetch roles of user '%s': %s", user_id, exc)
            raise BackendResourcesError(f"Failed to fetch roles of user '{user_id}': {_public_reason(exc)}") from exc
        return [role["name"] for role in roles if role.get("name")]

    def get_user_groups(self, user_id: str) -> list[str]:
        """Group names of a user, in Keycloak order."""
        try:
            groups = self.users.get_user_groups(self.realm, user_id)
        except PROVIDER_ERRORS as exc:
            logger.error("Failed to fetch groups of user '%s': %s", user_id, exc)
            raise BackendResourcesError(f"Failed to fetch groups of user '{user_id}': {_public_reason(exc)}") from exc
        return [group["name"] for group in groups if group.get("name")]
