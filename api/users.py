from __future__ import annotations

from flask import Blueprint, request, g, abort, current_app
from typing import Tuple

from api.responses import generate_response
from models.schemas.user import RoleUpdateSchema, UserOutSchema, UserUpdateSchema
from models.user import Role
from utils.decorators import jwt_required, roles_required
from utils.errors import forbidden

MAX_LIMIT = 100

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
role_update_schema = RoleUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def _service():
    return current_app.extensions["session_service"]


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def ensure_self_or_admin(user_id: str):
    identity = g.current_identity
    if identity.id != user_id and not identity.is_admin:
        raise forbidden("You can only manage your own account")


@bp.get("/users")
@jwt_required()
def list_users():
    """
    List users
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer }
      - { in: query, name: limit, type: integer }
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    page, limit = parse_pagination()
    accounts, total = _service().list(page=page, limit=limit)
    return generate_response(
        200,
        "Users fetched successfully",
        user_list_out_schema.dump(accounts),
        meta={"page": page, "limit": limit, "total": total},
    )


@bp.get("/users/<user_id>")
@jwt_required()
def get_user(user_id: str):
    """
    Get a user by id
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    account = _service().get_by_id(user_id)
    return generate_response(200, "User fetched successfully", {"user": user_out_schema.dump(account)})


@bp.put("/users/<user_id>")
@jwt_required()
def update_user(user_id: str):
    """
    Update a user - self or admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      200: { description: OK }
      403: { description: Forbidden }
      409: { description: Email already registered }
    """
    ensure_self_or_admin(user_id)
    payload = request.get_json(silent=True) or {}
    patch = user_update_schema.load(payload)
    account = _service().update(user_id, patch)
    return generate_response(200, "User updated successfully", {"user": user_out_schema.dump(account)})


@bp.delete("/users/<user_id>")
@jwt_required()
def delete_user(user_id: str):
    """
    Delete a user - self or admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: OK }
      403: { description: Forbidden }
      404: { description: Not found }
    """
    ensure_self_or_admin(user_id)
    _service().delete(user_id)
    return generate_response(200, "User deleted successfully")


@bp.put("/users/<user_id>/role")
@roles_required(Role.ADMIN)
def set_role(user_id: str):
    """
    Admin-only: set the role of a user.
    Body: { "role": "ADMIN" }
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            role: { type: string, enum: [USER, ADMIN] }
    responses:
      200: { description: OK }
      403: { description: Forbidden }
      404: { description: Not found }
    """
    payload = request.get_json(silent=True) or {}
    data = role_update_schema.load(payload)
    account = _service().update(user_id, {"role": data["role"]})
    return generate_response(200, "User role updated successfully", {"user": user_out_schema.dump(account)})
