# Overview: Flask API routes for user accounts; parses input and returns envelopes.

# backend/managefy/routes/users.py
"""
User API routes

Register and login are the only unauthenticated endpoints of the API.
Account mutations act on the caller only: a path user ID that is not the
caller's is refused with 401.
"""

from flask import Blueprint, g

from ..decorators import require_auth
from ..responses import json_body, ok
from ..services import auth_service, user_service


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.post("/register")
def register_route():
    data = json_body()
    user, token = auth_service.register(data.get("email"), data.get("password"), data.get("name"))
    return ok({"token": token, "userId": user.id})


@users_bp.post("/login")
def login_route():
    data = json_body()
    user, token = auth_service.login(data.get("email"), data.get("password"))
    return ok({"token": token, "userId": user.id})


@users_bp.get("")
@require_auth
def list_users_route():
    return ok([user.to_dict() for user in user_service.get_users()])


@users_bp.get("/<id:user_id>")
@require_auth
def get_user_route(user_id: int):
    return ok(user_service.get_user(user_id).to_dict())


@users_bp.put("")
@require_auth
def update_user_route():
    data = json_body()
    user = user_service.update_user(g.current_user, data.get("email"), data.get("name"))
    return ok(user.to_dict())


@users_bp.put("/<id:user_id>/generateValidation")
@require_auth
def generate_validation_route(user_id: int):
    user_service.require_self(g.current_user, user_id)
    return ok(user_service.generate_validation(g.current_user))


@users_bp.put("/<id:user_id>/validate/<code>")
@require_auth
def validate_user_route(user_id: int, code: str):
    user_service.require_self(g.current_user, user_id)
    return ok(user_service.validate_user(g.current_user, code))


@users_bp.delete("/<id:user_id>")
@require_auth
def delete_user_route(user_id: int):
    user_service.require_self(g.current_user, user_id)
    return ok(user_service.delete_user(g.current_user))
