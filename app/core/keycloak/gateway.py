"""IdP gateway used by the registration saga and the sync handlers.

Wraps UserService and RoleService behind the handful of operations the core
needs, so tests can swap in an in-memory double with the same methods.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable, Optional, Protocol

from .client import KeycloakClient
from .roles import RoleService
from .users import UserService

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Operations the core performs against the IdP."""

    def find_user_by_email(self, email: str) -> Optional[dict]: ...

    def find_user_by_email_or_username(self, term: str) -> Optional[dict]: ...

    def create_user(self, email: str, password: str, first_name: Optional[str], last_name: Optional[str]) -> str: ...

    def assign_realm_role(self, user_id: str, role_name: str) -> None: ...

    def replace_app_role(self, user_id: str, role_name: str, app_roles: Iterable[str]) -> None: ...

    def update_user(self, user_id: str, representation: dict) -> None: ...

    def delete_user(self, user_id: str) -> None: ...


class KeycloakIdentityProvider:
    """IdentityProvider backed by the Keycloak Admin REST API.

    The admin session is opened lazily on first use and refreshed by
    KeycloakClient when its token is about to expire.
    """

    def __init__(self, cfg, client_factory: Optional[Callable[[], KeycloakClient]] = None):
        self.realm = cfg.keycloak_realm
        self._client_factory = client_factory or (lambda: KeycloakClient.from_config(cfg))
        self._client: Optional[KeycloakClient] = None

    @property
    def client(self) -> KeycloakClient:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    @property
    def users(self) -> UserService:
        return UserService(self.client, self.realm)

    @property
    def roles(self) -> RoleService:
        return RoleService(self.client, self.realm)

    def find_user_by_email(self, email: str) -> Optional[dict]:
        return self.users.find_by_email(email)

    def find_user_by_email_or_username(self, term: str) -> Optional[dict]:
        return self.users.find_by_email_or_username(term)

    def create_user(self, email: str, password: str, first_name: Optional[str], last_name: Optional[str]) -> str:
        return self.users.create_user(email, password, first_name, last_name)

    def assign_realm_role(self, user_id: str, role_name: str) -> None:
        self.roles.add_realm_role(user_id, role_name)

    def replace_app_role(self, user_id: str, role_name: str, app_roles: Iterable[str]) -> None:
        self.roles.replace_app_role(user_id, role_name, app_roles)

    def update_user(self, user_id: str, representation: dict) -> None:
        self.users.update_user(user_id, representation)

    def delete_user(self, user_id: str) -> None:
        self.users.delete_user(user_id)
