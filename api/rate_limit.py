"""
Request rate limiting (Flask-Limiter).

A default limit (RATELIMIT_DEFAULT) applies to every route; the auth
blueprint gets its own, stricter limit against password guessing.
Each app builds its own Limiter so counters never outlive the app.
"""
from flask import Blueprint, Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


def configure_rate_limiting(app: Flask, auth_blueprint: Blueprint) -> Limiter:
    # storage, default limits and headers come from the RATELIMIT_* config keys
    limiter = Limiter(get_remote_address, app=app)
    limiter.limit(app.config["AUTH_RATE_LIMIT"])(auth_blueprint)
    return limiter
