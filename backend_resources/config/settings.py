"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

SECRETS_DIR = Path("/run/secrets")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] Loaded {secret_name} from {SECRETS_DIR}")
                return secret_value
        except OSError as e:
            print(f"[settings] Failed to read {secret_file}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    demo_mode: bool

    # Keycloak
    keycloak_url: str = ""
    keycloak_realm: str = "itm"
    keycloak_service_realm: str = "itm"
    keycloak_issuer: str = ""
    keycloak_server_url: str = ""
    keycloak_request_timeout: float = 5.0

    # Service Account
    keycloak_service_client_id: str = "backend-resources"
    keycloak_service_client_secret: str = ""

    # Authorization
    required_role: str = "MODERATOR"

    # Logging
    log_level: str = "INFO"


def _get_or_default(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or fall back to the demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    keycloak_url = _get_or_default("KEYCLOAK_URL", demo_default="http://127.0.0.1:8080", demo_mode=demo_mode)
    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "itm")
    keycloak_service_realm = os.environ.get("KEYCLOAK_SERVICE_REALM", keycloak_realm)

    keycloak_issuer = _get_or_default(
        "KEYCLOAK_ISSUER",
        demo_default=f"{keycloak_url.rstrip('/')}/realms/{keycloak_realm}",
        demo_mode=demo_mode,
    )
    keycloak_server_url = os.environ.get("KEYCLOAK_SERVER_URL", keycloak_issuer)

    timeout_raw = os.environ.get("KEYCLOAK_REQUEST_TIMEOUT", "5")
    try:
        keycloak_request_timeout = float(timeout_raw)
    except ValueError:
        raise RuntimeError(f"KEYCLOAK_REQUEST_TIMEOUT must be a number, got '{timeout_raw}'")

    keycloak_service_client_id = _get_or_default(
        "KEYCLOAK_SERVICE_CLIENT_ID",
        demo_default="backend-resources",
        demo_mode=demo_mode,
    )

    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET",
    )
    if not keycloak_service_client_secret:
        if not demo_mode:
            raise RuntimeError(
                "KEYCLOAK_SERVICE_CLIENT_SECRET not found in /run/secrets or environment. "
                "Set DEMO_MODE=true for local development."
            )
        keycloak_service_client_secret = "demo-service-secret"
        print("[demo-mode] Using default for KEYCLOAK_SERVICE_CLIENT_SECRET")

    required_role = os.environ.get("REQUIRED_ROLE", "MODERATOR").strip()
    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; realm={keycloak_realm}; client_id={keycloak_service_client_id}")

    if demo_mode:
        print("[settings] WARNING: Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_service_realm=keycloak_service_realm,
        keycloak_issuer=keycloak_issuer,
        keycloak_server_url=keycloak_server_url,
        keycloak_request_timeout=keycloak_request_timeout,
        keycloak_service_client_id=keycloak_service_client_id,
        keycloak_service_client_secret=keycloak_service_client_secret,
        required_role=required_role,
        log_level=log_level,
    )
