import pytest

from app.core import rbac
from app.core.roles import Role


def test_collect_roles_realm_then_client_roles():
    claims = {
        "realm_access": {"roles": ["client", "offline_access"]},
        "resource_access": {
            "web-app": {"roles": ["freelancer", "client"]},
            "account": {"roles": ["manage-account"]},
        },
    }
    assert rbac.collect_roles(claims) == ["client", "offline_access", "freelancer", "manage-account"]


def test_map_claims_prefixes_and_uppercases():
    claims = {"realm_access": {"roles": ["client", "admin"]}}
    assert rbac.map_claims_to_authorities(claims) == ["ROLE_CLIENT", "ROLE_ADMIN"]


def test_map_claims_client_roles_only():
    claims = {"resource_access": {"web-app": {"roles": ["freelancer"]}}}
    assert rbac.map_claims_to_authorities(claims) == ["ROLE_FREELANCER"]


@pytest.mark.parametrize(
    "claims",
    [
        None,
        "not-a-dict",
        {},
        {"realm_access": "admin"},
        {"realm_access": {"roles": "admin"}},
        {"resource_access": ["web-app"]},
        {"resource_access": {"web-app": {"roles": None}}},
    ],
)
def test_malformed_claims_yield_no_authorities(claims):
    assert rbac.map_claims_to_authorities(claims) == []


def test_duplicates_are_removed_on_exact_role_text():
    claims = {
        "realm_access": {"roles": ["client", "client"]},
        "resource_access": {"a": {"roles": ["client"]}, "b": {"roles": ["CLIENT"]}},
    }
    # "client" and "CLIENT" are distinct role strings, both mapping to ROLE_CLIENT
    assert rbac.map_claims_to_authorities(claims) == ["ROLE_CLIENT", "ROLE_CLIENT"]


def test_every_authority_has_prefix_and_is_uppercase():
    claims = {"realm_access": {"roles": ["a-b", "Mixed_Case", "x1"]}}
    for authority in rbac.map_claims_to_authorities(claims):
        assert authority.startswith("ROLE_")
        assert authority == authority.upper()


@pytest.mark.parametrize(
    "authorities,role,expected",
    [
        (["ROLE_ADMIN"], Role.ADMIN, True),
        (["ROLE_CLIENT"], Role.ADMIN, False),
        (["ROLE_FREELANCER"], "freelancer", True),
        (["ROLE_FREELANCER"], "ROLE_FREELANCER", True),
        ([], "client", False),
    ],
)
def test_has_authority(authorities, role, expected):
    assert rbac.has_authority(authorities, role) is expected
