"""Profile Store REST endpoints (/api/users)."""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from app.core.profiles import ProfileCreate, ProfileUpdate

bp = Blueprint("users", __name__, url_prefix="/api/users")


def _profiles():
    return current_app.extensions["identity_services"].profiles


@bp.route("", methods=["GET"])
def list_users():
    return jsonify([record.to_dict() for record in _profiles().list_all()])


@bp.route("/<int:profile_id>", methods=["GET"])
def get_user(profile_id: int):
    return jsonify(_profiles().get(profile_id).to_dict())


@bp.route("/email/<path:email>", methods=["GET"])
def get_user_by_email(email: str):
    return jsonify(_profiles().get_by_email(email).to_dict())


@bp.route("", methods=["POST"])
def create_user():
    """Create a profile; an existing profile with the same email is returned as is."""
    record = _profiles().create(ProfileCreate.from_dict(request.get_json(silent=True)))
    return jsonify(record.to_dict()), 201


@bp.route("/<int:profile_id>", methods=["PUT"])
def update_user(profile_id: int):
    """Partial update; committed changes are propagated to the IdP."""
    record = _profiles().update(profile_id, ProfileUpdate.from_dict(request.get_json(silent=True)))
    return jsonify(record.to_dict())


@bp.route("/<int:profile_id>", methods=["DELETE"])
def delete_user(profile_id: int):
    _profiles().delete(profile_id)
    return "", 204
