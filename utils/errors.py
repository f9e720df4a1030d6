"""
Structured application error.

Every domain failure raised by the store, the session service or the auth
interceptor is an AppError carrying an ErrorKind. HTTP status codes are
assigned only at the boundary (api.errors).
"""
from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INTERNAL = "INTERNAL"


class AppError(Exception):
    """Domain failure with a kind, a client-safe message and an optional machine code."""

    def __init__(self, kind: ErrorKind, message: str, code: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code or kind.value

    def __repr__(self) -> str:
        return f"<AppError {self.kind.value} code={self.code} message={self.message!r}>"


def conflict(message: str, code: str | None = None) -> AppError:
    return AppError(ErrorKind.CONFLICT, message, code)


def not_found(message: str = "User not found", code: str | None = None) -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message, code)


def unauthorized(message: str = "Unauthorized", code: str | None = None) -> AppError:
    return AppError(ErrorKind.UNAUTHORIZED, message, code)


def forbidden(message: str = "Insufficient role", code: str | None = None) -> AppError:
    return AppError(ErrorKind.FORBIDDEN, message, code)


def internal(message: str = "An unexpected error occurred", code: str | None = None) -> AppError:
    return AppError(ErrorKind.INTERNAL, message, code)
