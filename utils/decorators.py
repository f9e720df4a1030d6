from __future__ import annotations

import logging
from functools import wraps

from flask import request, g, current_app

from models.user import Identity, Role
from utils.errors import forbidden, unauthorized
from utils.tokens import TokenError

logger = logging.getLogger(__name__)

BEARER = "Bearer"


def extract_bearer_token(header: str | None) -> str | None:
    """Return the token of an exact `Bearer <token>` header value, else None."""
    if not header:
        return None
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER or not parts[1]:
        return None
    return parts[1]


def authenticate_request() -> Identity:
    """
    Verify the bearer access token of the current request and attach the
    caller's identity to flask.g. Raises UNAUTHORIZED on any failure.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise unauthorized("No token provided", code="NO_TOKEN")

    tokens = current_app.extensions["token_authority"]
    try:
        claims = tokens.verify_access(token)
    except TokenError as exc:
        logger.info("Access token rejected: %s", exc)
        raise unauthorized("Invalid token", code="INVALID_TOKEN") from exc

    store = current_app.extensions["account_store"]
    user = store.find_by_id(claims.get("sub"))
    if user is None:
        # token outlived its account
        raise unauthorized("Invalid token", code="INVALID_TOKEN")

    identity = Identity.from_user(user)
    g.current_identity = identity
    return identity


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            authenticate_request()
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(*required_roles: Role):
    """
    Allow access if the caller holds ANY of the required roles.
    """
    req = {Role.parse(role) for role in required_roles}

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            if g.current_identity.role not in req:
                raise forbidden("Insufficient role", code="FORBIDDEN")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
