"""Keycloak user management operations."""
from __future__ import annotations
import logging
from typing import Optional, List

from .client import KeycloakClient
from .exceptions import KeycloakAPIError

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing Keycloak users in one realm."""

    def __init__(self, client: KeycloakClient, realm: str):
        """Initialize user service.

        Args:
            client: Authenticated Keycloak client
            realm: Realm holding the application users
        """
        self.client = client
        self.realm = realm

    def search(self, term: str, exact: bool = True) -> List[dict]:
        """Search users by email/username.

        Args:
            term: Email or username to search for
            exact: Exact email match when True, Keycloak substring search otherwise

        Returns:
            List of user representations (possibly empty)
        """
        if exact:
            params = {"email": term, "exact": "true"}
        else:
            params = {"search": term}
        resp = self.client.get(f"/admin/realms/{self.realm}/users", params=params)
        return resp.json() or []

    def find_by_email(self, email: str) -> Optional[dict]:
        """Return the user whose email equals the given one (case-insensitive)."""
        target = email.strip().lower()
        for user in self.search(email.strip(), exact=True):
            if (user.get("email") or "").strip().lower() == target:
                return user
        return None

    def find_by_email_or_username(self, term: str) -> Optional[dict]:
        """Locate a user whose email or username matches the term case-insensitively.

        Tries an exact email search first and falls back to a substring
        search, since users created outside the application may only carry a
        matching username.
        """
        target = term.strip()
        found = self.search(target, exact=True)
        if not found:
            found = self.search(target, exact=False)
        lowered = target.lower()
        for user in found:
            if (user.get("email") or "").lower() == lowered or (user.get("username") or "").lower() == lowered:
                return user
        return None

    def create_user(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> str:
        """Create an enabled, email-verified user with a permanent password.

        Args:
            email: Email, also used as username
            password: Initial (non-temporary) password
            first_name: First name
            last_name: Last name

        Returns:
            Keycloak user ID taken from the Location header

        Raises:
            KeycloakAPIError: If Keycloak does not answer 201 Created
        """
        payload = {
            "username": email,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "enabled": True,
            "emailVerified": True,
            "credentials": [{"type": "password", "value": password, "temporary": False}],
        }
        endpoint = f"/admin/realms/{self.realm}/users"
        resp = self.client.post(endpoint, json=payload)
        location = resp.headers.get("Location", "")
        if resp.status_code != 201 or not location:
            raise KeycloakAPIError(resp.status_code, resp.text or "missing Location header", endpoint)
        return location.rstrip("/").rsplit("/", 1)[-1]

    def update_user(self, user_id: str, representation: dict) -> None:
        """Replace the user representation."""
        self.client.put(f"/admin/realms/{self.realm}/users/{user_id}", json=representation)

    def delete_user(self, user_id: str) -> None:
        """Remove the user from the realm."""
        self.client.delete(f"/admin/realms/{self.realm}/users/{user_id}")
