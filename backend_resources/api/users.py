"""User administration endpoints.

    GET  /api/users/hello            liveness check, returns "user"
    POST /api/users                  create a user in the configured realm
    GET  /api/users/<id>             user details with roles and groups
    GET  /api/users/<id>/roles       {id: [role names]}
    GET  /api/users/<id>/groups      {id: [group names]}

All calls except ``hello`` require a Bearer token with the configured role.
"""
from __future__ import annotations
from uuid import UUID

from flask import Blueprint, request, jsonify, current_app, abort

from backend_resources.api.decorators import require_role
from backend_resources.core.models import UserRequest
from backend_resources.core.user_management import UserManagementService

bp = Blueprint("users", __name__, url_prefix="/api/users")


def _service() -> UserManagementService:
    return current_app.config["USER_MANAGEMENT"]


@bp.route("/hello", methods=["GET"])
def hello():
    return ("user", 200, {"Content-Type": "text/plain; charset=utf-8"})


@bp.route("", methods=["POST"])
@require_role()
def create_user():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object")

    user_request = UserRequest.from_json(payload)
    user_id = _service().create_user(user_request)
    return jsonify({"id": user_id}), 200


@bp.route("/<uuid:user_id>", methods=["GET"])
@require_role()
def get_user_by_id(user_id: UUID):
    user = _service().get_user_by_id(str(user_id))
    return jsonify(user.to_dict()), 200


@bp.route("/<uuid:user_id>/roles", methods=["GET"])
@require_role()
def get_user_roles(user_id: UUID):
    roles = _service().get_user_roles(str(user_id))
    return jsonify({str(user_id): roles}), 200


@bp.route("/<uuid:user_id>/groups", methods=["GET"])
@require_role()
def get_user_groups(user_id: UUID):
    groups = _service().get_user_groups(str(user_id))
    return jsonify({str(user_id): groups}), 200
