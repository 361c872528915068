"""Backend resources: user administration API over Keycloak.

To use the Flask app:
    from backend_resources.flask_app import create_app

To use Keycloak services:
    from backend_resources.core.keycloak import UserService, KeycloakClient
"""
# Note: flask_app is not imported here so the Keycloak client can be used
# without loading settings.
