"""Role-Based Access Control helpers.

Turns the role claims of a verified Keycloak access token into the
``ROLE_<NAME>`` authorities used by the access-control checks.
"""
from __future__ import annotations
from typing import Any, Iterable, Union

from app.core.roles import Role

AUTHORITY_PREFIX = "ROLE_"


def _roles_list(container: Any) -> list[str]:
    """Return container["roles"] as strings, or [] when it is not a list."""
    if not isinstance(container, dict):
        return []
    roles = container.get("roles")
    if not isinstance(roles, list):
        return []
    return [str(role) for role in roles]


def _unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def collect_roles(claims: Any) -> list[str]:
    """Collect realm roles then client roles from every client in resource_access.

    Duplicates are removed on the exact string, so "client" and "CLIENT"
    are kept as two separate entries.
    """
    if not isinstance(claims, dict):
        return []

    realm_roles = _roles_list(claims.get("realm_access"))

    client_roles: list[str] = []
    resource_access = claims.get("resource_access")
    if isinstance(resource_access, dict):
        for client_access in resource_access.values():
            client_roles.extend(_roles_list(client_access))

    return _unique(realm_roles + _unique(client_roles))


def map_claims_to_authorities(claims: Any) -> list[str]:
    """Map token claims to authorities ("ROLE_" + upper-cased role).

    Args:
        claims: Verified token claims

    Returns:
        Authorities in claim order. An unreadable claim map yields no authorities.

    Example:
        >>> map_claims_to_authorities({"realm_access": {"roles": ["client"]}})
        ['ROLE_CLIENT']
    """
    return [f"{AUTHORITY_PREFIX}{role.upper()}" for role in collect_roles(claims)]


def has_authority(authorities: Iterable[str], role: Union[Role, str]) -> bool:
    """Check whether the authority set grants the given role."""
    name = role.value if isinstance(role, Role) else str(role).strip().upper()
    if not name.startswith(AUTHORITY_PREFIX):
        name = f"{AUTHORITY_PREFIX}{name}"
    return name in set(authorities)
