"""IdP side of the sync protocol: apply profile updates/deletes to Keycloak users.

The target user is located by email or username. A missing user is not an
error: there is nothing to update or delete.
"""
from __future__ import annotations
import logging
from typing import Optional

from app.core.errors import ValidationError
from app.core.roles import APP_ROLES, normalize_and_validate

logger = logging.getLogger(__name__)


def _check_text(field: str, value) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")


class IdentitySyncService:
    """Handlers behind PUT/DELETE /api/auth/admin/users/by-email/<email>."""

    def __init__(self, identity_provider):
        self.idp = identity_provider

    def delete_user_by_email(self, email: Optional[str]) -> bool:
        """Delete the IdP user matching the email.

        Returns:
            True if a user was deleted, False if none matched
        """
        if not email or not email.strip():
            return False
        user = self.idp.find_user_by_email_or_username(email.strip())
        if user is None:
            logger.info("No IdP user found for email: %s", email)
            return False
        self.idp.delete_user(user["id"])
        logger.info("Deleted IdP user by email: %s", email)
        return True

    def update_user_by_email(
        self,
        current_email: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        new_email: Optional[str] = None,
        role: Optional[str] = None,
    ) -> bool:
        """Apply name/email changes and optionally replace the application role.

        Raises:
            ValidationError: If a field is not a string or null
            InvalidRole: If a role is supplied and is not an application role

        Returns:
            True if a user was updated, False if none matched
        """
        if not current_email or not current_email.strip():
            return False

        for field, value in (("firstName", first_name), ("lastName", last_name), ("email", new_email), ("role", role)):
            _check_text(field, value)

        # Validate before any IdP write so a bad role leaves the user untouched
        new_role = normalize_and_validate(role) if role and role.strip() else None

        user = self.idp.find_user_by_email_or_username(current_email.strip())
        if user is None:
            logger.warning("No IdP user found for update by email: %s", current_email)
            return False

        representation = dict(user)
        if first_name is not None:
            representation["firstName"] = first_name
        if last_name is not None:
            representation["lastName"] = last_name
        if new_email is not None and new_email.strip():
            representation["email"] = new_email.strip()
            representation["username"] = new_email.strip()
        self.idp.update_user(user["id"], representation)

        if new_role is not None:
            self.idp.replace_app_role(user["id"], new_role.value, APP_ROLES)

        logger.info(
            "Updated IdP user: %s -> firstName=%s, lastName=%s, email=%s, role=%s",
            current_email, first_name, last_name, new_email, new_role.value if new_role else None,
        )
        return True
