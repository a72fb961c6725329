"""Application role vocabulary and normalization."""
from __future__ import annotations
from enum import Enum
from typing import Optional

from app.core.errors import InvalidRole


class Role(str, Enum):
    """Business roles shared by the IdP realm and the Profile Store."""

    CLIENT = "CLIENT"
    FREELANCER = "FREELANCER"
    ADMIN = "ADMIN"


APP_ROLES: tuple[str, ...] = tuple(role.value for role in Role)


def normalize_and_validate(role_text: Optional[str]) -> Role:
    """Trim and upper-case role text and map it onto a Role.

    Args:
        role_text: Raw role text (e.g. "freelancer", " Client ")

    Returns:
        Matching Role member

    Raises:
        InvalidRole: If the text is empty or not an application role
    """
    if isinstance(role_text, Role):
        return role_text
    candidate = (role_text or "").strip().upper()
    try:
        return Role(candidate)
    except ValueError:
        raise InvalidRole(f"Invalid role. Allowed: {', '.join(APP_ROLES)}") from None
