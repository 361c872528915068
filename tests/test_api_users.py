"""Tests for the /api/users endpoints with a mocked Keycloak user service."""
import uuid
from unittest.mock import Mock

import pytest
import requests

from backend_resources.core.keycloak import KeycloakAPIError, UserNotFoundError

VALID_USER = {
    "username": "chupakabra",
    "email": "chupakabra@gmail.com",
    "password": "password",
    "firstName": "Vladimir",
    "lastName": "Putin",
}


def _created(user_id="5f0c3e5e-6b8e-4a6a-9d43-0f1b9c7d2a11", status=201):
    return Mock(
        status_code=status,
        headers={"Location": f"http://keycloak:8080/admin/realms/itm/users/{user_id}"},
    )


@pytest.fixture()
def user_id():
    return str(uuid.uuid4())


@pytest.fixture()
def wired_user(keycloak_users, user_id):
    keycloak_users.get_user.return_value = {
        "id": user_id,
        "username": "chupakabra",
        "firstName": "Vladimir",
        "lastName": "Putin",
        "email": "chupakabra@gmail.com",
    }
    keycloak_users.get_user_roles.return_value = [
        {"id": "r1", "name": "MODERATOR"},
        {"id": "r2", "name": "offline_access"},
    ]
    keycloak_users.get_user_groups.return_value = [
        {"id": "g1", "name": "Moderators", "path": "/Moderators"},
    ]
    return user_id


class TestHello:
    def test_returns_user(self, client, keycloak_users):
        response = client.get("/api/users/hello")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "user"
        assert response.content_type.startswith("text/plain")
        assert keycloak_users.mock_calls == []

    def test_repeatable(self, client):
        bodies = {client.get("/api/users/hello").get_data(as_text=True) for _ in range(5)}
        assert bodies == {"user"}

    def test_does_not_require_token(self, flask_app):
        flask_app.config["SKIP_OAUTH_FOR_TESTS"] = False
        with flask_app.test_client() as client:
            response = client.get("/api/users/hello")
        assert response.status_code == 200


class TestCreateUser:
    def test_success(self, client, keycloak_users):
        keycloak_users.create_user.return_value = _created()

        response = client.post("/api/users", json=VALID_USER)

        assert response.status_code == 200
        assert response.get_json() == {"id": "5f0c3e5e-6b8e-4a6a-9d43-0f1b9c7d2a11"}
        keycloak_users.create_user.assert_called_once()
        realm, representation = keycloak_users.create_user.call_args.args
        assert realm == "itm"
        assert representation["username"] == "chupakabra"
        assert representation["email"] == "chupakabra@gmail.com"
        assert representation["firstName"] == "Vladimir"
        assert representation["lastName"] == "Putin"
        assert representation["enabled"] is True
        assert representation["credentials"] == [
            {"type": "password", "value": "password", "temporary": False}
        ]

    def test_non_success_status_returns_500(self, client, keycloak_users):
        keycloak_users.create_user.return_value = Mock(status_code=500, headers={})

        response = client.post("/api/users", json=VALID_USER)

        assert response.status_code == 500
        assert response.content_type.startswith("text/plain")
        assert "Failed to create user 'chupakabra'" in response.get_data(as_text=True)

    def test_keycloak_conflict_returns_500(self, client, keycloak_users):
        keycloak_users.create_user.side_effect = KeycloakAPIError(
            409, '{"errorMessage":"User exists with same username"}', "http://keycloak.internal:8080/admin/realms/itm/users"
        )

        response = client.post("/api/users", json=VALID_USER)

        body = response.get_data(as_text=True)
        assert response.status_code == 500
        assert body == "Failed to create user 'chupakabra': Keycloak returned status 409"
        assert "keycloak.internal" not in body
        assert "User exists" not in body

    def test_keycloak_unreachable_returns_500(self, client, keycloak_users):
        keycloak_users.create_user.side_effect = requests.ConnectionError("connection refused")

        response = client.post("/api/users", json=VALID_USER)

        assert response.status_code == 500
        assert "connection refused" not in response.get_data(as_text=True)

    def test_invalid_payload_returns_field_errors(self, client, keycloak_users):
        payload = dict(VALID_USER, username="", email="not-an-email")

        response = client.post("/api/users", json=payload)

        assert response.status_code == 400
        assert response.get_json() == {
            "name": "Name is required",
            "email": "Invalid email format",
        }
        keycloak_users.create_user.assert_not_called()

    def test_blank_username_only(self, client, keycloak_users):
        response = client.post("/api/users", json=dict(VALID_USER, username="   "))

        assert response.status_code == 400
        assert response.get_json() == {"name": "Name is required"}
        keycloak_users.create_user.assert_not_called()

    def test_non_json_body_rejected(self, client, keycloak_users):
        response = client.post("/api/users", data="username=x", content_type="text/plain")

        assert response.status_code == 400
        assert response.get_json()["error"] == "Bad Request"
        keycloak_users.create_user.assert_not_called()

    def test_json_array_rejected(self, client, keycloak_users):
        response = client.post("/api/users", json=[VALID_USER])

        assert response.status_code == 400
        keycloak_users.create_user.assert_not_called()


class TestGetUser:
    def test_success(self, client, wired_user):
        response = client.get(f"/api/users/{wired_user}")

        assert response.status_code == 200
        assert response.get_json() == {
            "firstName": "Vladimir",
            "lastName": "Putin",
            "email": "chupakabra@gmail.com",
            "roles": ["MODERATOR", "offline_access"],
            "groups": ["Moderators"],
        }

    def test_looks_up_configured_realm(self, client, keycloak_users, wired_user):
        client.get(f"/api/users/{wired_user}")

        keycloak_users.get_user.assert_called_once_with("itm", wired_user)
        keycloak_users.get_user_roles.assert_called_once_with("itm", wired_user)
        keycloak_users.get_user_groups.assert_called_once_with("itm", wired_user)

    def test_repeatable(self, client, wired_user):
        first = client.get(f"/api/users/{wired_user}")
        second = client.get(f"/api/users/{wired_user}")
        assert first.status_code == second.status_code == 200
        assert first.get_json() == second.get_json()

    def test_lookup_failure_returns_500(self, client, keycloak_users, user_id):
        keycloak_users.get_user.side_effect = KeycloakAPIError(500, "boom", f"/admin/realms/itm/users/{user_id}")

        response = client.get(f"/api/users/{user_id}")

        assert response.status_code == 500
        assert f"Failed to fetch user '{user_id}'" in response.get_data(as_text=True)

    def test_unknown_user_returns_500(self, client, keycloak_users, user_id):
        keycloak_users.get_user.side_effect = UserNotFoundError(f"User '{user_id}' not found in realm 'itm'")

        response = client.get(f"/api/users/{user_id}")

        assert response.status_code == 500

    def test_roles_lookup_failure_returns_500(self, client, keycloak_users, wired_user):
        keycloak_users.get_user_roles.side_effect = KeycloakAPIError(403, "forbidden", "role-mappings")

        response = client.get(f"/api/users/{wired_user}")

        assert response.status_code == 500

    def test_unexpected_error_returns_500(self, client, keycloak_users, user_id):
        keycloak_users.get_user.side_effect = RuntimeError("mis-wired client")

        response = client.get(f"/api/users/{user_id}")

        assert response.status_code == 500
        assert response.get_data(as_text=True) == "Internal Server Error"

    def test_non_uuid_id_not_routed(self, client, keycloak_users):
        response = client.get("/api/users/not-a-uuid")

        assert response.status_code == 404
        keycloak_users.get_user.assert_not_called()


class TestRolesAndGroups:
    def test_roles(self, client, wired_user):
        response = client.get(f"/api/users/{wired_user}/roles")

        assert response.status_code == 200
        assert response.get_json() == {wired_user: ["MODERATOR", "offline_access"]}

    def test_groups(self, client, wired_user):
        response = client.get(f"/api/users/{wired_user}/groups")

        assert response.status_code == 200
        assert response.get_json() == {wired_user: ["Moderators"]}

    def test_groups_failure_returns_500(self, client, keycloak_users, user_id):
        keycloak_users.get_user_groups.side_effect = requests.Timeout("read timed out")

        response = client.get(f"/api/users/{user_id}/groups")

        assert response.status_code == 500


class TestAuthorization:
    @pytest.fixture()
    def secured_client(self, flask_app):
        flask_app.config["SKIP_OAUTH_FOR_TESTS"] = False
        with flask_app.test_client() as client:
            yield client

    def test_create_requires_token(self, secured_client, keycloak_users):
        response = secured_client.post("/api/users", json=VALID_USER)

        assert response.status_code == 401
        assert response.get_json()["error"] == "Unauthorized"
        keycloak_users.create_user.assert_not_called()

    def test_get_requires_token(self, secured_client, keycloak_users, user_id):
        response = secured_client.get(f"/api/users/{user_id}")

        assert response.status_code == 401
        keycloak_users.get_user.assert_not_called()

    def test_missing_role_forbidden(self, secured_client, keycloak_users, monkeypatch, user_id):
        from backend_resources.api import decorators

        monkeypatch.setattr(
            decorators,
            "validate_jwt_token",
            lambda _token: {"preferred_username": "bob", "realm_access": {"roles": ["viewer"]}},
        )

        response = secured_client.get(f"/api/users/{user_id}", headers={"Authorization": "Bearer token"})

        assert response.status_code == 403
        assert response.get_json() == {"error": "Forbidden", "message": "Required role: MODERATOR"}
        keycloak_users.get_user.assert_not_called()

    def test_non_string_role_claims_forbidden(self, secured_client, keycloak_users, monkeypatch, user_id):
        from backend_resources.api import decorators

        monkeypatch.setattr(
            decorators,
            "validate_jwt_token",
            lambda _token: {"preferred_username": "bob", "realm_access": {"roles": [7, "viewer"]}},
        )

        response = secured_client.get(f"/api/users/{user_id}", headers={"Authorization": "Bearer token"})

        assert response.status_code == 403
        keycloak_users.get_user.assert_not_called()

    def test_skip_flag_still_needs_bearer_header(self, flask_app, wired_user):
        with flask_app.test_client() as anonymous:
            assert anonymous.get(f"/api/users/{wired_user}").status_code == 401
            response = anonymous.get(f"/api/users/{wired_user}", headers={"Authorization": "Bearer test-token"})

        assert response.status_code == 200

    def test_moderator_allowed(self, secured_client, monkeypatch, wired_user):
        from backend_resources.api import decorators

        monkeypatch.setattr(
            decorators,
            "validate_jwt_token",
            lambda _token: {"preferred_username": "user", "realm_access": {"roles": ["moderator"]}},
        )

        response = secured_client.get(f"/api/users/{wired_user}", headers={"Authorization": "Bearer token"})

        assert response.status_code == 200
