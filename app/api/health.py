"""Health check endpoints."""
from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Liveness probe."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness probe reporting which sync features are configured.

    Never includes secret values.
    """
    cfg = current_app.config["APP_CONFIG"]
    return jsonify({
        "status": "ready",
        "adminSyncEnabled": bool(cfg.service_secret.strip()),
        "propagationEnabled": cfg.propagation_configured,
        "remoteProfileStore": bool(cfg.profile_service_url),
    })
