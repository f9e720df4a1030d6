"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

Every route here shares a stricter rate limit (AUTH_RATE_LIMIT).
Registration always creates a USER; roles are changed by admins only.
Login and refresh return {user, accessToken, refreshToken}; the refresh
token is also set as an HttpOnly cookie scoped to /api/v1/auth.
"""
from __future__ import annotations

from flask import Blueprint, request, g, current_app

from api.responses import generate_response
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema, RefreshSchema
from services.session_service import SessionService, SessionTokens
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__)
user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
refresh_schema = RefreshSchema()


def _service() -> SessionService:
    return current_app.extensions["session_service"]


def _session_payload(session: SessionTokens) -> dict:
    return {
        "user": user_out_schema.dump(session.account),
        "accessToken": session.access_token,
        "refreshToken": session.refresh_token,
    }


def _set_refresh_cookie(response, token: str):
    cfg = current_app.config
    response.set_cookie(
        cfg["REFRESH_COOKIE_NAME"],
        token,
        max_age=int(cfg["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        path=cfg["REFRESH_COOKIE_PATH"],
        secure=cfg["REFRESH_COOKIE_SECURE"],
        httponly=True,
        samesite="Strict",
    )
    return response


def _session_response(message: str, session: SessionTokens):
    response, status = generate_response(200, message, _session_payload(session))
    return _set_refresh_cookie(response, session.refresh_token), status


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, name, password]
          properties:
            email: { type: string }
            name: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)
    account = _service().register(
        email=data["email"],
        name=data["name"],
        password=data["password"],
    )
    return generate_response(201, "User registered successfully", {"user": user_out_schema.dump(account)})


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    session = _service().login(data["email"], data["password"])
    return _session_response("User logged in successfully", session)


@bp.post("/refresh")
def refresh():
    """
    Use the refresh token to obtain new access and refresh tokens (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns new tokens)
      401:
        description: Invalid refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)
    token = data.get("refreshToken") or request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    session = _service().refresh(token)
    return _session_response("Token refreshed successfully", session)


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: clears the stored refresh token of the caller
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    _service().logout(g.current_identity.id)
    response, status = generate_response(200, "User logged out successfully")
    response.delete_cookie(current_app.config["REFRESH_COOKIE_NAME"], path=current_app.config["REFRESH_COOKIE_PATH"])
    return response, status


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    account = _service().get_by_id(g.current_identity.id)
    return generate_response(200, "User fetched successfully", {"user": user_out_schema.dump(account)})
