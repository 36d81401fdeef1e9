from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from utils.exceptions import ForbiddenError, UnauthorizedError


def get_session_manager():
    return current_app.extensions["session_manager"]


def get_user_service():
    return current_app.extensions["user_service"]


def _bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise UnauthorizedError("No authentication token provided")
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise UnauthorizedError("Invalid authentication token format")
    return token


def jwt_required():
    """
    Require a valid access token. InvalidTokenError and TokenExpiredError
    propagate so the client can tell "refresh and retry" from "log in again".
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = get_session_manager().authenticate(_bearer_token())
            g.current_user = user
            g.current_user_role = user.role
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Allow access if the user's role is one of required_roles, 403 otherwise.
    """
    req = set(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            if req and g.current_user_role not in req:
                raise ForbiddenError("Insufficient permissions")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
