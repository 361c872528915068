"""Core Business Logic Module

Framework-independent logic behind the user API.

Module Structure:
    - keycloak/           : Low-level Keycloak Admin API client
    - user_management.py  : Realm-bound user facade (create, lookup, roles, groups)
    - models.py           : UserRequest / UserResponse
    - validators.py       : Input validation
    - rbac.py             : Role helpers for bearer token claims
    - exceptions.py       : BackendResourcesError, ValidationError

These modules are NOT auto-imported; import explicitly when needed:
    from backend_resources.core.user_management import UserManagementService
"""
