"""Keycloak Admin API client library.

Architecture:
- client.py: HTTP client with admin authentication and auto-refresh
- users.py: User lookup, creation, update and removal
- roles.py: Realm role mappings
- gateway.py: IdentityProvider facade used by the registration saga and sync handlers
- exceptions.py: Typed exceptions for error handling

Usage:
    from app.core.keycloak import KeycloakIdentityProvider

    idp = KeycloakIdentityProvider(cfg)
    user = idp.find_user_by_email("alice@example.com")
"""
from .client import KeycloakClient, REQUEST_TIMEOUT
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    RoleNotFoundError,
)
from .users import UserService
from .roles import RoleService
from .gateway import IdentityProvider, KeycloakIdentityProvider

__all__ = [
    "KeycloakClient",
    "REQUEST_TIMEOUT",
    "KeycloakError",
    "KeycloakAPIError",
    "RoleNotFoundError",
    "UserService",
    "RoleService",
    "IdentityProvider",
    "KeycloakIdentityProvider",
]
