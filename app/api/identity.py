"""IdP-facing endpoints: registration, user info and the admin sync API.

Routes under /api/auth/admin/ sit behind the trust gate (X-Service-Secret).
"""
from __future__ import annotations
import logging

from flask import Blueprint, current_app, g, jsonify, request

from app.api.decorators import require_bearer_token
from app.core.errors import ValidationError
from app.core.registration import RegistrationRequest
from app.core.roles import Role

bp = Blueprint("identity", __name__, url_prefix="/api/auth")

logger = logging.getLogger(__name__)


def _services():
    return current_app.extensions["identity_services"]


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


@bp.route("/register", methods=["POST"])
def register():
    """Public self-registration: create the IdP user and its profile."""
    user_id = _services().saga.register_or_raise(RegistrationRequest.from_dict(_json_body()))
    return jsonify({"userId": user_id}), 201


@bp.route("/userinfo", methods=["GET"])
@require_bearer_token()
def userinfo():
    """Return the caller's identity and mapped authorities."""
    claims = g.token_claims
    return jsonify({
        "sub": claims.get("sub"),
        "email": claims.get("email"),
        "preferredUsername": claims.get("preferred_username"),
        "authorities": g.authorities,
    })


@bp.route("/admin/users", methods=["POST"])
@require_bearer_token(roles=[Role.ADMIN])
def admin_create_user():
    """Administrator-driven registration (same saga as /register)."""
    user_id = _services().saga.register_or_raise(RegistrationRequest.from_dict(_json_body()))
    return jsonify({"userId": user_id}), 201


@bp.route("/admin/users/by-email/<path:email>", methods=["PUT"])
def sync_update_user(email: str):
    """Apply a profile update to the IdP user. Unknown email is a no-op."""
    payload = _json_body()
    _services().identity_sync.update_user_by_email(
        email,
        payload.get("firstName"),
        payload.get("lastName"),
        payload.get("email"),
        payload.get("role"),
    )
    return "", 204


@bp.route("/admin/users/by-email/<path:email>", methods=["DELETE"])
def sync_delete_user(email: str):
    """Delete the IdP user. Unknown email is a no-op."""
    _services().identity_sync.delete_user_by_email(email)
    return "", 204
