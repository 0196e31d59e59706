# Overview: Flask API routes for login and user management.

"""
User & Auth Routes

POST /api/auth/login answers {success: true, user} or a 401 {error} whose
message says whether the account is missing, inactive, or the password
is wrong. No session token is issued; the caller keeps the returned user.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import handles_errors
from ..services import auth_service
from ..services.auth_service import AuthError


users_bp = Blueprint("users", __name__, url_prefix="/api")


@users_bp.post("/auth/login")
def login_route():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")
    if not email or not password:
        return jsonify({"error": "email and password are required"}), 400

    try:
        user = auth_service.authenticate(email, password)
        return jsonify({"success": True, "user": user})
    except AuthError as e:
        current_app.logger.info("Login rejected for %s: %s", email, e)
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to log in")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.get("/users")
@handles_errors("load users")
def list_users_route():
    return jsonify([u.to_dict() for u in auth_service.list_users()])


@users_bp.post("/users")
@handles_errors("create user")
def create_user_route():
    user = auth_service.create_user(request.get_json(silent=True))
    return jsonify(user.to_dict()), 201


@users_bp.put("/users/<user_id>")
@handles_errors("update user")
def update_user_route(user_id: str):
    user = auth_service.update_user(user_id, request.get_json(silent=True))
    return jsonify(user.to_dict())


@users_bp.delete("/users/<user_id>")
@handles_errors("delete user")
def delete_user_route(user_id: str):
    auth_service.delete_user(user_id)
    return jsonify({"success": True})
