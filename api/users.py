from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.user import UserUpdateSchema, UserOutSchema
from models.user import ROLE_ADMIN
from utils.decorators import jwt_required, roles_required, get_user_service

bp = Blueprint("users", __name__, url_prefix="/users")

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()


@bp.get("/profile")
@jwt_required()
def get_profile():
    """
    Get the current user's profile.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": user_out_schema.dump(g.current_user)}), 200


@bp.put("/profile")
@jwt_required()
def update_profile():
    """
    Update first/last name or avatar of the current user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            first_name: { type: string }
            last_name: { type: string }
            avatar_url: { type: string }
    responses:
      200:
        description: OK
      422:
        description: Validation error
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})
    user = get_user_service().update_profile(g.current_user.id, **data)
    return jsonify({"data": user_out_schema.dump(user), "message": "Profile updated successfully"}), 200


@bp.delete("/account")
@jwt_required()
def delete_account():
    """
    Delete the current user's account. Refresh tokens go with it.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
    """
    get_user_service().delete(g.current_user.id)
    return jsonify({"data": None, "message": "Account deleted successfully"}), 200


@bp.post("/<user_id>/deactivate")
@roles_required([ROLE_ADMIN])
def deactivate_user(user_id: str):
    """
    Admin-only: deactivate an account and revoke its refresh tokens.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      403: { description: Insufficient permissions }
      404: { description: User not found }
    """
    user = get_user_service().deactivate(user_id)
    return jsonify({"data": user_out_schema.dump(user), "message": "User deactivated"}), 200


@bp.post("/<user_id>/activate")
@roles_required([ROLE_ADMIN])
def activate_user(user_id: str):
    """
    Admin-only: re-activate an account.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: OK }
      403: { description: Insufficient permissions }
      404: { description: User not found }
    """
    user = get_user_service().activate(user_id)
    return jsonify({"data": user_out_schema.dump(user), "message": "User activated"}), 200
