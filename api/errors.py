from flask import current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from api.responses import generate_response
from utils.errors import AppError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.INTERNAL: 500,
}


def error_response(code: str, message: str, status: int, details: dict | None = None):
    extra = {"code": code}
    if details:
        extra["details"] = details
    return generate_response(status, message, None, **extra)


def register_error_handlers(app):
    # Domain errors carry their kind; the status is decided here only
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        status = STATUS_BY_KIND[err.kind]
        if status >= 500:
            logger.error("Internal error: %s", err.code, exc_info=err.__cause__ or err)
        return error_response(err.code, err.message, status)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response(ErrorKind.VALIDATION_FAILED.value, "Invalid input", 422, details=err.messages)

    # Werkzeug HTTPExceptions (404 routing, 405, bad JSON...) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = (err.name or "HTTP_ERROR").upper().replace(" ", "_")
        return error_response(code, err.description or err.name, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logging.exception("Unhandled exception", exc_info=err)
        details = None
        # In dev, include exception type to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__}
        return error_response(ErrorKind.INTERNAL.value, "An unexpected error occurred", 500, details=details)
