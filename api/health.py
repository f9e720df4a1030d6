from flask import Blueprint

from api.responses import generate_response

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
    """
    return generate_response(200, "ok", {"version": "1.0.0"})
