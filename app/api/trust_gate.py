"""Shared-secret gate for the internal admin sync endpoints.

Every request under the admin path prefix must carry X-Service-Secret equal
to the configured service secret. With no secret configured, every such
request is rejected.
"""
from __future__ import annotations
import hmac
import logging

from flask import Flask, request

from app.core.errors import AuthorizationError
from app.core.sync import SERVICE_SECRET_HEADER

logger = logging.getLogger(__name__)


class TrustGate:
    """Checks inbound requests against the shared service secret."""

    def __init__(self, cfg):
        self.prefix = cfg.admin_path_prefix
        self.secret = cfg.service_secret or ""

    def applies_to(self, path: str) -> bool:
        return path.startswith(self.prefix)

    def check(self, path: str, presented) -> None:
        """Raise AuthorizationError unless the presented secret is acceptable for path."""
        if not self.applies_to(path):
            return
        if not self.secret.strip():
            logger.warning("Rejected %s: service secret not configured", path)
            raise AuthorizationError("Service secret not configured")
        if presented is None or not hmac.compare_digest(presented.encode("utf-8"), self.secret.encode("utf-8")):
            logger.warning("Rejected %s: invalid or missing %s", path, SERVICE_SECRET_HEADER)
            raise AuthorizationError(f"Invalid or missing {SERVICE_SECRET_HEADER}")


def install_trust_gate(app: Flask, cfg) -> TrustGate:
    """Register the gate as the first before_request hook of the app."""
    gate = TrustGate(cfg)

    def enforce_service_secret() -> None:
        gate.check(request.path, request.headers.get(SERVICE_SECRET_HEADER))

    app.before_request_funcs.setdefault(None, []).insert(0, enforce_service_secret)
    return gate
