"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with its blueprint, Keycloak client and error handlers.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from backend_resources.config import AppConfig, load_settings
from backend_resources.core.keycloak import KeycloakClient, UserService
from backend_resources.core.user_management import UserManagementService

# Request bodies are small JSON documents
JSON_MAX_SIZE_BYTES = 65536


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, users: Optional[UserService] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings; loaded from the environment when omitted
        users: Keycloak user service; built from ``cfg`` when omitted
    """
    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = JSON_MAX_SIZE_BYTES
    app.logger.setLevel(getattr(logging, cfg.log_level, logging.INFO))

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    if users is None:
        users = UserService(_build_keycloak_client(cfg))
    app.config["USER_MANAGEMENT"] = UserManagementService(users, cfg.keycloak_realm)

    # Register blueprints
    from backend_resources.api import errors
    from backend_resources.api import users as users_routes

    app.register_blueprint(users_routes.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print(f"[flask_app] User API registered at /api/users (realm={cfg.keycloak_realm})")

    return app


def _build_keycloak_client(cfg: AppConfig) -> KeycloakClient:
    """Service account client; the first token is fetched on the first request."""
    client = KeycloakClient(cfg.keycloak_url, timeout=cfg.keycloak_request_timeout)
    client.use_service_account(
        cfg.keycloak_service_realm,
        cfg.keycloak_service_client_id,
        cfg.keycloak_service_client_secret,
    )
    return client


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=8080, debug=True)
