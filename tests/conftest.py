"""Pytest shared fixtures."""
import os
import pathlib
import sys
from unittest.mock import Mock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import pytest
import requests

from backend_resources.config import AppConfig
from backend_resources.core.keycloak import UserService
from backend_resources.flask_app import create_app


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a live Keycloak.

    Integration tests are marked with @pytest.mark.integration and are allowed
    to perform real HTTP calls.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(method):
        def _stub(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _stub

    for method in ("get", "post"):
        monkeypatch.setattr(requests, method, _refuse(method.upper()))


# ─────────────────────────────────────────────────────────────────────────────
# Application
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        demo_mode=True,
        keycloak_url="http://keycloak:8080",
        keycloak_realm="itm",
        keycloak_service_realm="itm",
        keycloak_issuer="http://keycloak:8080/realms/itm",
        keycloak_server_url="http://keycloak:8080/realms/itm",
        keycloak_service_client_id="backend-resources",
        keycloak_service_client_secret="test-secret",
        required_role="MODERATOR",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def app_config():
    return make_config()


@pytest.fixture()
def keycloak_users():
    """Stand-in for the Keycloak user service."""
    return Mock(spec=UserService)


@pytest.fixture()
def flask_app(app_config, keycloak_users):
    flask_app = create_app(app_config, users=keycloak_users)
    flask_app.config.update(TESTING=True, SKIP_OAUTH_FOR_TESTS=True)
    return flask_app


@pytest.fixture()
def client(flask_app):
    """Flask test client with bearer token validation bypassed."""
    with flask_app.test_client() as client:
        client.environ_base["HTTP_AUTHORIZATION"] = "Bearer test-token"
        yield client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires running Keycloak)"
    )
