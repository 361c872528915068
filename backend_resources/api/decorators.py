"""
Flask decorators for authentication and authorization.

Validates OAuth 2.0 Bearer tokens (RFC 6750) issued by Keycloak and checks
the caller's realm or client roles.

Security:
- RSA-SHA256 signature verification via JWKS (RFC 7517)
- Expiration, not-before and issuer validation (RFC 7519)
- JWKS caching (1-hour refresh)
"""

import logging
from functools import wraps
from typing import Optional, Dict, Any

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    ExpiredSignatureError,
    InvalidIssuerError,
    InvalidSignatureError,
    DecodeError,
)
from flask import request, jsonify, current_app, g

from backend_resources.core.rbac import collect_roles, has_role, principal_name

logger = logging.getLogger(__name__)

# Global JWKS client (cached singleton)
_jwks_client: Optional[PyJWKClient] = None


class TokenValidationError(Exception):
    """Exception raised when JWT token validation fails."""
    pass


def get_jwks_client() -> PyJWKClient:
    """
    Get cached JWKS client.

    Keys are fetched from ``{keycloak_server_url}/protocol/openid-connect/certs``
    and selected by the ``kid`` of the incoming token.
    """
    global _jwks_client

    if _jwks_client is None:
        cfg = current_app.config["APP_CONFIG"]
        jwks_url = f"{cfg.keycloak_server_url.rstrip('/')}/protocol/openid-connect/certs"

        logger.info(f"Initializing JWKS client for: {jwks_url}")

        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
            lifespan=3600,
            headers={"User-Agent": "backend-resources/1.0"},
        )

    return _jwks_client


def validate_jwt_token(token: str) -> Dict[str, Any]:
    """
    Validate JWT Bearer token.

    Checks signature (RS256 via JWKS), exp, nbf, iat and issuer. Audience is
    not checked: Keycloak access tokens carry ``aud=account`` by default.

    Returns:
        dict: Validated token claims

    Raises:
        TokenValidationError: If any validation fails
    """
    cfg = current_app.config["APP_CONFIG"]

    if current_app.config.get("TESTING") and current_app.config.get("SKIP_OAUTH_FOR_TESTS", False):
        logger.warning("JWT validation SKIPPED (TESTING + SKIP_OAUTH_FOR_TESTS)")
        return {
            "sub": "test-user",
            "preferred_username": "user",
            "iss": "test-issuer",
            "realm_access": {"roles": [cfg.required_role]},
        }

    try:
        jwks_client = get_jwks_client()
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=cfg.keycloak_issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_nbf": True,
                "verify_iss": True,
                "verify_aud": False,
                "require": ["exp", "iat"],
            },
            leeway=5,
        )
        logger.debug(f"JWT validated for: {principal_name(claims) or 'unknown'}")
        return claims

    except ExpiredSignatureError:
        raise TokenValidationError("Token expired (exp claim)")
    except InvalidIssuerError as e:
        raise TokenValidationError(f"Invalid issuer (token from wrong Keycloak realm): {e}")
    except InvalidSignatureError:
        raise TokenValidationError("Invalid signature (token tampered or wrong key)")
    except DecodeError as e:
        raise TokenValidationError(f"Token decode error (malformed JWT): {e}")
    except Exception as e:
        logger.error(f"JWT validation failed: {e}")
        raise TokenValidationError(f"Token validation failed: {e}")


def _auth_error(status: int, error: str, message: str):
    response = jsonify({"error": error, "message": message})
    response.status_code = status
    if status == 401:
        response.headers["WWW-Authenticate"] = 'Bearer realm="backend-resources"'
    return response


def require_role(role: Optional[str] = None):
    """
    Decorator requiring a valid Bearer token that carries ``role``.

    Args:
        role: Required realm or client role; defaults to ``APP_CONFIG.required_role``

    Returns:
        401 for a missing, malformed or invalid token, 403 when the role is missing.

    Example:
        @bp.route("", methods=["POST"])
        @require_role()
        def create_user():
            ...
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth_header = request.headers.get("Authorization", "")

            if not auth_header:
                logger.warning("Request missing Authorization header")
                return _auth_error(401, "Unauthorized", "Authorization header required. Use 'Authorization: Bearer <token>'")

            if not auth_header.startswith("Bearer "):
                logger.warning(f"Request with invalid Authorization format: {auth_header[:20]}")
                return _auth_error(401, "Unauthorized", "Invalid Authorization header format. Expected 'Bearer <token>'")

            token = auth_header[7:].strip()
            if not token:
                return _auth_error(401, "Unauthorized", "Bearer token is empty")

            try:
                claims = validate_jwt_token(token)
            except TokenValidationError as e:
                logger.warning(f"JWT validation failed: {e}")
                return _auth_error(401, "Unauthorized", str(e))

            required = role or current_app.config["APP_CONFIG"].required_role
            roles = collect_roles(claims)
            if not has_role(roles, required):
                logger.warning(f"Caller '{principal_name(claims)}' lacks role {required}; has {roles}")
                return _auth_error(403, "Forbidden", f"Required role: {required}")

            g.principal = principal_name(claims)

            return fn(*args, **kwargs)

        return wrapper
    return decorator
