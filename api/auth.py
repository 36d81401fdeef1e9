"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout
- POST /auth/logout-all      (bearer)
- POST /auth/change-password (bearer)
- GET  /auth/me              (bearer)

Request bodies are validated with marshmallow here; everything else is
delegated to the SessionManager, whose errors are rendered by api/errors.py.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.user import (
    RegisterSchema,
    LoginSchema,
    RefreshTokenSchema,
    LogoutSchema,
    ChangePasswordSchema,
    UserOutSchema,
)
from utils.decorators import jwt_required, get_session_manager

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
logout_schema = LogoutSchema()
change_password_schema = ChangePasswordSchema()
user_out_schema = UserOutSchema()


def _provenance():
    """User agent and source IP recorded on issued refresh tokens."""
    return request.headers.get("User-Agent"), request.remote_addr


def _auth_payload(result):
    return {
        "user": user_out_schema.dump(result.user),
        "tokens": result.tokens.to_dict(),
    }


@bp.post("/register")
def register():
    """
    Register a new user and sign them in.
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
          required: [email, password, first_name, last_name]
          properties:
            email: { type: string }
            password: { type: string }
            first_name: { type: string }
            last_name: { type: string }
    responses:
      201:
        description: Created (returns user and tokens)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    result = get_session_manager().register(
        data["email"], data["password"], data["first_name"], data["last_name"]
    )
    return jsonify({"data": _auth_payload(result), "message": "Registration successful"}), 201


@bp.post("/login")
def login():
    """
    Login: return the user with an access_token and refresh_token
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
        description: OK (returns user and tokens)
      401:
        description: Invalid email or password, or account deactivated
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    user_agent, ip_address = _provenance()
    result = get_session_manager().login(data["email"], data["password"], user_agent, ip_address)
    return jsonify({"data": _auth_payload(result), "message": "Login successful"}), 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Rotate a refresh token: the presented token is consumed and a new pair returned.
    Presenting an already used or revoked token signs the user out everywhere.
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
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid, expired or revoked refresh token
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    user_agent, ip_address = _provenance()
    tokens = get_session_manager().refresh(data["refresh_token"], user_agent, ip_address)
    return jsonify({"data": {"tokens": tokens.to_dict()}, "message": "Token refreshed successfully"}), 200


@bp.post("/logout")
def logout():
    """
    Logout: revokes the given refresh token. Always succeeds.
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
             refresh_token: { type: string }
    responses:
      200:
        description: OK
    """
    data = logout_schema.load(request.get_json(silent=True) or {})
    get_session_manager().logout(data.get("refresh_token"))
    return jsonify({"data": None, "message": "Logout successful"}), 200


@bp.post("/logout-all")
@jwt_required()
def logout_all():
    """
    Revoke every refresh token of the current user.
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
    revoked = get_session_manager().logout_all(g.current_user.id)
    return jsonify({"data": {"revoked": revoked}, "message": "All sessions logged out successfully"}), 200


@bp.post("/change-password")
@jwt_required()
def change_password():
    """
    Change the current user's password. All refresh tokens are revoked.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             current_password: { type: string }
             new_password: { type: string }
             confirm_password: { type: string }
    responses:
      200:
        description: OK
      401:
        description: Current password is incorrect
      422:
        description: Validation error
    """
    data = change_password_schema.load(request.get_json(silent=True) or {})
    get_session_manager().change_password(
        g.current_user.id, data["current_password"], data["new_password"]
    )
    return jsonify({"data": None, "message": "Password changed successfully"}), 200


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
    return jsonify({"data": user_out_schema.dump(g.current_user)}), 200
