import pytest

from app.core.errors import InvalidRole, ValidationError
from app.core.roles import APP_ROLES, Role, normalize_and_validate


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("client", Role.CLIENT),
        (" Freelancer ", Role.FREELANCER),
        ("ADMIN", Role.ADMIN),
        ("aDmIn", Role.ADMIN),
    ],
)
def test_normalize_accepts_application_roles(raw, expected):
    assert normalize_and_validate(raw) is expected


@pytest.mark.parametrize("raw", [None, "", "   ", "superuser", "ROLE_ADMIN", "client-admin"])
def test_normalize_rejects_unknown_or_empty(raw):
    with pytest.raises(InvalidRole) as exc:
        normalize_and_validate(raw)
    assert "CLIENT" in str(exc.value)


def test_invalid_role_is_a_validation_error():
    with pytest.raises(ValidationError):
        normalize_and_validate("nope")
    assert InvalidRole.status == 400


def test_role_instance_passes_through():
    assert normalize_and_validate(Role.FREELANCER) is Role.FREELANCER


def test_app_roles_cover_the_enum():
    assert APP_ROLES == ("CLIENT", "FREELANCER", "ADMIN")
