"""Pytest shared fixtures: in-memory IdP double, config factory, Flask client."""
import os
import pathlib
import sys
import uuid

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import pytest
import requests

from app.config.settings import AppConfig
from app.core.keycloak import KeycloakAPIError
from app.core.profiles import InMemoryProfileRepository
from app.flask_app import build_services, create_app

SERVICE_SECRET = "s3cr3t-service"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, tmp_path):
    """Fail loudly if a unit test reaches for the network; keep audit files in tmp."""
    def _refuse(*args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {args[:2]}")

    monkeypatch.setattr(requests, "get", _refuse)
    monkeypatch.setattr(requests, "post", _refuse)
    monkeypatch.setattr(requests, "put", _refuse)
    monkeypatch.setattr(requests, "delete", _refuse)
    monkeypatch.setattr(requests.Session, "request", _refuse)
    monkeypatch.setenv("AUDIT_LOG_DIR", str(tmp_path / "audit"))
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-audit-key")


# ─────────────────────────────────────────────────────────────────────────────
# In-memory IdP
# ─────────────────────────────────────────────────────────────────────────────
class FakeIdentityProvider:
    """IdentityProvider double keeping users and realm roles in dictionaries.

    Set ``fail_on[<method>] = exc`` to make a method raise.
    """

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.realm_roles: dict[str, set] = {}
        self.fail_on: dict[str, Exception] = {}
        self.calls: list[tuple] = []

    def _enter(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise self.fail_on[name]

    def add_user(self, email, username=None, roles=()):
        user_id = str(uuid.uuid4())
        self.users[user_id] = {
            "id": user_id,
            "username": username or email,
            "email": email,
            "firstName": None,
            "lastName": None,
            "enabled": True,
            "emailVerified": True,
        }
        self.realm_roles[user_id] = set(roles)
        return user_id

    def by_email(self, email):
        for user in self.users.values():
            if (user.get("email") or "").lower() == email.lower():
                return user
        return None

    def find_user_by_email(self, email):
        self._enter("find_user_by_email", email)
        return self.by_email(email)

    def find_user_by_email_or_username(self, term):
        self._enter("find_user_by_email_or_username", term)
        for user in self.users.values():
            if (user.get("email") or "").lower() == term.lower() or (user.get("username") or "").lower() == term.lower():
                return user
        return None

    def create_user(self, email, password, first_name, last_name):
        self._enter("create_user", email)
        if self.by_email(email):
            raise KeycloakAPIError(409, "User exists with same email", "/admin/realms/test/users")
        user_id = self.add_user(email)
        self.users[user_id].update(firstName=first_name, lastName=last_name, password=password)
        return user_id

    def assign_realm_role(self, user_id, role_name):
        self._enter("assign_realm_role", user_id, role_name)
        self.realm_roles[user_id].add(role_name)

    def replace_app_role(self, user_id, role_name, app_roles):
        self._enter("replace_app_role", user_id, role_name)
        self.realm_roles[user_id] -= set(app_roles)
        self.realm_roles[user_id].add(role_name)

    def update_user(self, user_id, representation):
        self._enter("update_user", user_id)
        self.users[user_id] = dict(representation)

    def delete_user(self, user_id):
        self._enter("delete_user", user_id)
        self.users.pop(user_id, None)
        self.realm_roles.pop(user_id, None)


class RecordingPropagator:
    """SyncPropagator double recording calls instead of sending HTTP."""

    def __init__(self):
        self.updates = []
        self.deletes = []

    def propagate_update(self, old_email, first_name, last_name, new_email, role):
        self.updates.append((old_email, first_name, last_name, new_email, role))
        return True

    def propagate_delete(self, email):
        self.deletes.append(email)
        return True


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def make_config():
    def _make(**overrides):
        base = dict(
            demo_mode=True,
            secret_key="test-secret-key",
            keycloak_url="https://kc.test",
            keycloak_realm="smart-freelance",
            keycloak_issuer="https://kc.test/realms/smart-freelance",
            keycloak_admin="admin",
            keycloak_admin_password="admin",
            service_secret=SERVICE_SECRET,
            sync_service_url="",
            sync_service_secret="",
        )
        base.update(overrides)
        return AppConfig(**base)
    return _make


@pytest.fixture
def idp():
    return FakeIdentityProvider()


@pytest.fixture
def propagator():
    return RecordingPropagator()


@pytest.fixture
def services(make_config, idp, propagator):
    return build_services(
        make_config(),
        identity_provider=idp,
        profile_repository=InMemoryProfileRepository(),
        propagator=propagator,
    )


@pytest.fixture
def flask_app(services):
    app = create_app(services.config, services=services)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(flask_app):
    """Flask test client wired to the in-memory IdP and Profile Store."""
    with flask_app.test_client() as client:
        yield client


@pytest.fixture
def service_headers():
    return {"X-Service-Secret": SERVICE_SECRET}
