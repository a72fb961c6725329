"""scripts/identity_sync.py command-line wrapper."""

import pytest

from scripts import identity_sync


@pytest.fixture
def wired(monkeypatch, services):
    """Route the CLI to the in-memory services instead of a live Keycloak."""
    monkeypatch.setattr(identity_sync, "load_settings", lambda: services.config)
    monkeypatch.setattr("app.flask_app.build_services", lambda cfg: services)
    return services


def test_no_command_prints_help(capsys):
    assert identity_sync.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_register_prints_user_id(wired, idp, capsys):
    code = identity_sync.main(["register", "--email", "a@example.com", "--password", "pw", "--role", "client"])

    assert code == 0
    user_id = capsys.readouterr().out.strip()
    assert user_id in idp.users


def test_register_invalid_role_fails(wired, idp, capsys):
    code = identity_sync.main(["register", "--email", "a@example.com", "--password", "pw", "--role", "boss"])

    assert code == 1
    assert "Invalid role" in capsys.readouterr().err
    assert idp.users == {}


def test_sync_delete(wired, idp, capsys):
    idp.add_user("a@example.com")

    assert identity_sync.main(["sync-delete", "--email", "a@example.com"]) == 0
    assert idp.users == {}
    assert "deleted" in capsys.readouterr().out


def test_sync_update_unknown_user(wired, capsys):
    assert identity_sync.main(["sync-update", "--email", "ghost@example.com", "--first", "X"]) == 0
    assert "no user found" in capsys.readouterr().out


def test_propagate_delete_requires_configuration(wired, capsys):
    assert identity_sync.main(["propagate-delete", "--email", "a@example.com"]) == 1
    assert "SYNC_SERVICE_URL" in capsys.readouterr().err


def test_verify_audit(capsys):
    from app.core import audit

    audit.log_event("register", "a@example.com")

    assert identity_sync.main(["verify-audit"]) == 0
    assert "1/1" in capsys.readouterr().out
