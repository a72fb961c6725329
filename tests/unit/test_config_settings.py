import pytest

from app.config import settings
from app.config.settings import _get_or_generate

ENV_VARS = [
    "DEMO_MODE", "FLASK_SECRET_KEY", "KEYCLOAK_URL", "KEYCLOAK_REALM", "KEYCLOAK_ISSUER",
    "KEYCLOAK_ADMIN", "KEYCLOAK_ADMIN_PASSWORD", "KEYCLOAK_ADMIN_CLIENT_SECRET",
    "SERVICE_SECRET", "ADMIN_PATH_PREFIX", "SYNC_SERVICE_URL", "SYNC_SERVICE_SECRET",
    "PROFILE_SERVICE_URL", "DEFAULT_PROFILE_PASSWORD",
]


@pytest.fixture
def secrets_dir(monkeypatch, tmp_path):
    """Point /run/secrets at an empty temp dir and clear the settings env vars."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_demo_mode_defaults(monkeypatch, secrets_dir):
    monkeypatch.setenv("DEMO_MODE", "true")

    cfg = settings.load_settings()

    assert cfg.demo_mode is True
    assert len(cfg.secret_key) > 20
    assert cfg.keycloak_url == "http://127.0.0.1:8080"
    assert cfg.keycloak_realm == "smart-freelance"
    assert cfg.keycloak_issuer == "http://127.0.0.1:8080/realms/smart-freelance"
    assert cfg.admin_path_prefix == "/api/auth/admin/"
    assert cfg.service_secret == ""
    assert cfg.propagation_configured is False
    assert cfg.default_profile_password == "changeme"


def test_production_requires_secret_key(monkeypatch, secrets_dir):
    monkeypatch.setenv("DEMO_MODE", "false")
    with pytest.raises(RuntimeError, match="FLASK_SECRET_KEY"):
        settings.load_settings()


def test_production_requires_keycloak_url(monkeypatch, secrets_dir):
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("FLASK_SECRET_KEY", "k")
    with pytest.raises(RuntimeError, match="KEYCLOAK_URL"):
        settings.load_settings()


def test_secrets_file_wins_over_env(monkeypatch, secrets_dir):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("SERVICE_SECRET", "from-env")
    (secrets_dir / "service_secret").write_text("from-file\n")

    cfg = settings.load_settings()

    assert cfg.service_secret == "from-file"


def test_sync_settings_and_prefix_normalization(monkeypatch, secrets_dir):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("KEYCLOAK_URL", "https://kc.example.com/")
    monkeypatch.setenv("SYNC_SERVICE_URL", " http://idp-sync:8081 ")
    monkeypatch.setenv("SYNC_SERVICE_SECRET", "shh")
    monkeypatch.setenv("ADMIN_PATH_PREFIX", "/internal/admin")

    cfg = settings.load_settings()

    assert cfg.keycloak_url == "https://kc.example.com"
    assert cfg.sync_service_url == "http://idp-sync:8081"
    assert cfg.propagation_configured is True
    assert cfg.admin_path_prefix == "/internal/admin/"
    assert cfg.jwks_url == "https://kc.example.com/realms/smart-freelance/protocol/openid-connect/certs"


def test_config_is_frozen(make_config):
    cfg = make_config()
    with pytest.raises(AttributeError):
        cfg.service_secret = "changed"


def test_get_or_generate(monkeypatch):
    monkeypatch.delenv("SOME_VAR", raising=False)
    assert _get_or_generate("SOME_VAR", demo_default="d", demo_mode=True) == "d"
    assert _get_or_generate("SOME_VAR", required=False) == ""
    with pytest.raises(RuntimeError):
        _get_or_generate("SOME_VAR")
    monkeypatch.setenv("SOME_VAR", "set")
    assert _get_or_generate("SOME_VAR") == "set"
