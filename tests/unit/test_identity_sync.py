import pytest

from app.core.errors import InvalidRole, ValidationError
from app.core.sync import IdentitySyncService


@pytest.fixture
def sync(idp):
    return IdentitySyncService(idp)


def test_delete_by_email_removes_user(sync, idp):
    user_id = idp.add_user("a@example.com")

    assert sync.delete_user_by_email("a@example.com") is True
    assert user_id not in idp.users


def test_delete_matches_username(sync, idp):
    user_id = idp.add_user("other@example.com", username="legacy-user")

    assert sync.delete_user_by_email("LEGACY-USER") is True
    assert user_id not in idp.users


def test_delete_unknown_email_is_noop(sync, idp):
    idp.add_user("a@example.com")

    assert sync.delete_user_by_email("b@example.com") is False
    assert len(idp.users) == 1


def test_update_names_email_and_role(sync, idp):
    user_id = idp.add_user("old@example.com", roles={"CLIENT", "offline_access"})

    assert sync.update_user_by_email("old@example.com", "Ann", "Lee", "new@example.com", "freelancer") is True

    user = idp.users[user_id]
    assert (user["firstName"], user["lastName"]) == ("Ann", "Lee")
    assert user["email"] == "new@example.com"
    assert user["username"] == "new@example.com"
    assert idp.realm_roles[user_id] == {"FREELANCER", "offline_access"}


def test_update_without_role_keeps_role_mappings(sync, idp):
    user_id = idp.add_user("a@example.com", roles={"CLIENT"})

    sync.update_user_by_email("a@example.com", first_name="Ann", role="")

    assert idp.realm_roles[user_id] == {"CLIENT"}
    assert "replace_app_role" not in [call[0] for call in idp.calls]


def test_update_blank_new_email_keeps_email(sync, idp):
    user_id = idp.add_user("a@example.com")

    sync.update_user_by_email("a@example.com", new_email="")

    assert idp.users[user_id]["email"] == "a@example.com"


def test_invalid_role_rejected_before_any_write(sync, idp):
    user_id = idp.add_user("a@example.com", roles={"CLIENT"})

    with pytest.raises(InvalidRole):
        sync.update_user_by_email("a@example.com", first_name="Changed", role="owner")

    assert idp.users[user_id]["firstName"] is None
    assert idp.calls == []


def test_update_unknown_email_is_noop(sync, idp):
    assert sync.update_user_by_email("ghost@example.com", first_name="x") is False
    assert [call[0] for call in idp.calls] == ["find_user_by_email_or_username"]


@pytest.mark.parametrize(
    "fields",
    [
        {"role": 5},
        {"first_name": ["Ann"]},
        {"last_name": {"x": 1}},
        {"new_email": 42},
    ],
)
def test_non_string_fields_rejected_before_lookup(sync, idp, fields):
    idp.add_user("a@example.com")

    with pytest.raises(ValidationError):
        sync.update_user_by_email("a@example.com", **fields)

    assert idp.calls == []
