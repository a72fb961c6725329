"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with all blueprints, middleware, and configuration.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from app.config import AppConfig, load_settings
from app.core.keycloak import KeycloakIdentityProvider
from app.core.profiles import InMemoryProfileRepository, ProfileService
from app.core.registration import RegistrationSaga
from app.core.sync import IdentitySyncService, ProfileServiceClient, SyncPropagator


@dataclass
class IdentityServices:
    """Services wired once per app and shared by the blueprints."""
    config: AppConfig
    identity_provider: Any
    profiles: ProfileService
    propagator: SyncPropagator
    saga: RegistrationSaga
    identity_sync: IdentitySyncService


def build_services(
    cfg: AppConfig,
    identity_provider: Any = None,
    profile_repository: Any = None,
    propagator: Optional[SyncPropagator] = None,
) -> IdentityServices:
    """Wire the core services from configuration.

    The registration saga writes profiles through the local ProfileService,
    unless PROFILE_SERVICE_URL points at a separate profile service.
    """
    idp = identity_provider or KeycloakIdentityProvider(cfg)
    propagator = propagator or SyncPropagator(cfg)
    profiles = ProfileService(
        profile_repository or InMemoryProfileRepository(),
        propagator,
        default_password=cfg.default_profile_password,
    )
    profile_gateway = ProfileServiceClient(cfg.profile_service_url) if cfg.profile_service_url else profiles
    return IdentityServices(
        config=cfg,
        identity_provider=idp,
        profiles=profiles,
        propagator=propagator,
        saga=RegistrationSaga(idp, profile_gateway),
        identity_sync=IdentitySyncService(idp),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, services: Optional[IdentityServices] = None) -> Flask:
    """Create and configure Flask application."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["SECRET_KEY"] = cfg.secret_key

    # Trust X-Forwarded-* headers from the gateway
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    app.extensions["identity_services"] = services or build_services(cfg)

    # Register blueprints
    from app.api import errors, health, identity, users
    from app.api.trust_gate import install_trust_gate

    app.register_blueprint(health.bp)
    app.register_blueprint(identity.bp)
    app.register_blueprint(users.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Shared-secret check on the admin sync prefix
    install_trust_gate(app, cfg)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print(f"[flask_app] Admin sync API gated at {cfg.admin_path_prefix}")
    if not cfg.propagation_configured:
        print("[flask_app] Profile changes will not be propagated (SYNC_SERVICE_URL/SYNC_SERVICE_SECRET unset)")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
