# Overview: Flask API routes for business memberships (user roles).

# backend/managefy/routes/user_roles.py
"""
User role API routes

Grant/modify rules live in permissions.rules; these routes only parse the
request and hand the caller to membership_service. Mutations are retried
on lock conflicts because the manager transfer touches two rows.
"""

from flask import Blueprint, g

from ..decorators import require_auth
from ..errors import BadRequestError
from ..responses import json_body, ok
from ..services import membership_service
from ..services.concurrency import run_with_retry
from ..validation import require_int


user_roles_bp = Blueprint("user_roles", __name__, url_prefix="/api/userRoles")


def _role_request(require_role: bool = True) -> tuple[int, int, str | None]:
    data = json_body()
    user_id = require_int(data.get("userId"), "userId", minimum=1)
    business_id = require_int(data.get("businessId"), "businessId", minimum=1)
    role = data.get("role")
    if require_role and not isinstance(role, str):
        raise BadRequestError("role is required")
    return user_id, business_id, role


@user_roles_bp.get("")
@require_auth
def list_my_roles_route():
    roles = membership_service.get_user_roles(g.current_user)
    return ok([role.to_dict() for role in roles])


@user_roles_bp.get("/business/<id:business_id>")
@require_auth
def list_business_roles_route(business_id: int):
    roles = membership_service.get_roles_by_business(g.current_user, business_id)
    return ok([role.to_dict() for role in roles])


@user_roles_bp.get("/business/<id:business_id>/user/<id:user_id>")
@require_auth
def get_role_route(business_id: int, user_id: int):
    return ok(membership_service.get_role(g.current_user, business_id, user_id).to_dict())


@user_roles_bp.post("")
@require_auth
def create_role_route():
    user_id, business_id, role = _role_request()
    created = run_with_retry(
        lambda: membership_service.create_role(g.current_user, user_id, business_id, role)
    )
    return ok(created.to_dict())


@user_roles_bp.put("")
@require_auth
def update_role_route():
    user_id, business_id, role = _role_request()
    updated = run_with_retry(
        lambda: membership_service.update_role(g.current_user, user_id, business_id, role)
    )
    return ok(updated.to_dict())


@user_roles_bp.put("/transfer")
@require_auth
def transfer_manager_route():
    user_id, business_id, _ = _role_request(require_role=False)
    promoted = run_with_retry(
        lambda: membership_service.transfer_manager(g.current_user, user_id, business_id)
    )
    return ok(promoted.to_dict())


@user_roles_bp.delete("/business/<id:business_id>/user/<id:user_id>")
@require_auth
def delete_role_route(business_id: int, user_id: int):
    result = run_with_retry(
        lambda: membership_service.delete_role(g.current_user, user_id, business_id)
    )
    return ok(result)


@user_roles_bp.delete("/business/<id:business_id>/leave")
@require_auth
def leave_business_route(business_id: int):
    result = run_with_retry(lambda: membership_service.leave_business(g.current_user, business_id))
    return ok(result)
