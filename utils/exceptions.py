"""
Application error taxonomy.

These exceptions are raised by the service layer and know nothing about
Flask. api/errors.py translates them into the JSON error envelope using the
status and code carried on each class.
"""
from __future__ import annotations


class AppError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestError(AppError):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class InvalidTokenError(UnauthorizedError):
    """Access token is malformed, forged or of the wrong type."""
    code = "INVALID_TOKEN"
    default_message = "Invalid authentication token"


class TokenExpiredError(UnauthorizedError):
    """Access token signature is fine but its exp claim has passed."""
    code = "TOKEN_EXPIRED"
    default_message = "Authentication token has expired"


class ForbiddenError(AppError):
    status = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(AppError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status = 409
    code = "CONFLICT"
    default_message = "Resource conflict"
