"""Keycloak realm role mapping operations."""
from __future__ import annotations
import logging
from typing import Iterable

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, RoleNotFoundError

logger = logging.getLogger(__name__)


class RoleService:
    """Service for managing realm role mappings."""

    def __init__(self, client: KeycloakClient, realm: str):
        """Initialize role service.

        Args:
            client: Authenticated Keycloak client
            realm: Realm name
        """
        self.client = client
        self.realm = realm

    def get_realm_role(self, role_name: str) -> dict:
        """Return the realm role representation.

        Raises:
            RoleNotFoundError: If the role does not exist in the realm
        """
        try:
            resp = self.client.get(f"/admin/realms/{self.realm}/roles/{role_name}")
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                raise RoleNotFoundError(f"Role '{role_name}' not found in realm '{self.realm}'") from exc
            raise
        return resp.json()

    def add_realm_role(self, user_id: str, role_name: str) -> None:
        """Grant a realm role to the user without touching other mappings."""
        role_rep = self.get_realm_role(role_name)
        self.client.post(
            f"/admin/realms/{self.realm}/users/{user_id}/role-mappings/realm",
            json=[{"id": role_rep["id"], "name": role_rep["name"]}],
        )

    def remove_realm_role(self, user_id: str, role_name: str) -> None:
        """Revoke a realm role from the user."""
        role_rep = self.get_realm_role(role_name)
        self.client.delete(
            f"/admin/realms/{self.realm}/users/{user_id}/role-mappings/realm",
            json=[{"id": role_rep["id"], "name": role_rep["name"]}],
        )

    def replace_app_role(self, user_id: str, new_role: str, app_roles: Iterable[str]) -> None:
        """Swap the user's application role so only new_role remains from app_roles.

        Removal failures are ignored (the role was usually not assigned).
        Realm roles outside app_roles are left untouched.
        """
        for role_name in app_roles:
            try:
                self.remove_realm_role(user_id, role_name)
            except (KeycloakAPIError, RoleNotFoundError) as exc:
                logger.debug("Ignoring removal of role %s for user %s: %s", role_name, user_id, exc)
        self.add_realm_role(user_id, new_role)
