"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass(frozen=True)
class AppConfig:
    """Application configuration container.

    Loaded once at process start and passed explicitly to the registration
    saga, the sync propagator and the trust gate.
    """
    # Mode
    demo_mode: bool

    # Flask
    secret_key: str

    # Keycloak (IdP)
    keycloak_url: str = ""
    keycloak_realm: str = "smart-freelance"
    keycloak_issuer: str = ""

    # Admin session against the IdP
    keycloak_admin_realm: str = "master"
    keycloak_admin: str = ""
    keycloak_admin_password: str = ""
    keycloak_admin_client_id: str = "admin-cli"
    keycloak_admin_client_secret: str = ""

    # Receiver side of the sync protocol (trust gate)
    service_secret: str = ""
    admin_path_prefix: str = "/api/auth/admin/"

    # Caller side of the sync protocol (propagator)
    sync_service_url: str = ""
    sync_service_secret: str = ""

    # Profile Store
    profile_service_url: str = ""
    default_profile_password: str = "changeme"

    @property
    def propagation_configured(self) -> bool:
        """True when both the sync base URL and the shared secret are set."""
        return bool(self.sync_service_url.strip()) and bool(self.sync_service_secret.strip())

    @property
    def jwks_url(self) -> str:
        """JWKS endpoint of the realm that issues bearer tokens."""
        return f"{self.keycloak_issuer.rstrip('/')}/protocol/openid-connect/certs"


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    # Flask secret key
    secret_key = _load_secret_from_file("flask_secret_key", "FLASK_SECRET_KEY")
    if not secret_key:
        if not demo_mode:
            raise RuntimeError("FLASK_SECRET_KEY not found in /run/secrets or environment")
        secret_key = secrets.token_urlsafe(48)
        print("[demo-mode] Generated temporary FLASK_SECRET_KEY")

    # Keycloak URLs
    keycloak_url = _get_or_generate(
        "KEYCLOAK_URL",
        demo_default="http://127.0.0.1:8080",
        demo_mode=demo_mode,
    ).rstrip("/")
    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "smart-freelance")
    keycloak_issuer = os.environ.get("KEYCLOAK_ISSUER") or f"{keycloak_url}/realms/{keycloak_realm}"

    # Admin credentials
    keycloak_admin = _get_or_generate("KEYCLOAK_ADMIN", demo_default="admin", demo_mode=demo_mode)
    keycloak_admin_password = _load_secret_from_file("keycloak_admin_password", "KEYCLOAK_ADMIN_PASSWORD")
    if not keycloak_admin_password:
        keycloak_admin_password = _get_or_generate(
            "KEYCLOAK_ADMIN_PASSWORD",
            demo_default="admin",
            demo_mode=demo_mode,
        )
    keycloak_admin_client_secret = _load_secret_from_file(
        "keycloak_admin_client_secret",
        "KEYCLOAK_ADMIN_CLIENT_SECRET",
    ) or ""

    # Shared secrets for the sync protocol. Blank values are legal: the
    # propagator becomes a no-op and the trust gate fails closed.
    service_secret = _load_secret_from_file("service_secret", "SERVICE_SECRET") or ""
    sync_service_secret = _load_secret_from_file("sync_service_secret", "SYNC_SERVICE_SECRET") or ""

    admin_path_prefix = os.environ.get("ADMIN_PATH_PREFIX", "/api/auth/admin/").strip() or "/api/auth/admin/"
    if not admin_path_prefix.endswith("/"):
        admin_path_prefix += "/"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; realm={keycloak_realm}; keycloak={keycloak_url}")
    if not service_secret:
        print("[settings] WARNING: SERVICE_SECRET empty - admin sync endpoints will reject every call")

    return AppConfig(
        demo_mode=demo_mode,
        secret_key=secret_key,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_issuer=keycloak_issuer,
        keycloak_admin_realm=os.environ.get("KEYCLOAK_ADMIN_REALM", "master"),
        keycloak_admin=keycloak_admin,
        keycloak_admin_password=keycloak_admin_password,
        keycloak_admin_client_id=os.environ.get("KEYCLOAK_ADMIN_CLIENT_ID", "admin-cli"),
        keycloak_admin_client_secret=keycloak_admin_client_secret,
        service_secret=service_secret,
        admin_path_prefix=admin_path_prefix,
        sync_service_url=os.environ.get("SYNC_SERVICE_URL", "").strip(),
        sync_service_secret=sync_service_secret,
        profile_service_url=os.environ.get("PROFILE_SERVICE_URL", "").strip(),
        default_profile_password=os.environ.get("DEFAULT_PROFILE_PASSWORD", "changeme"),
    )
