# Overview: Flask API routes for businesses; parses input and returns envelopes.

from flask import Blueprint, g

from ..decorators import require_auth
from ..responses import json_body, ok
from ..services import business_service


businesses_bp = Blueprint("businesses", __name__, url_prefix="/api/businesses")


@businesses_bp.get("")
@require_auth
def list_businesses_route():
    businesses = business_service.get_businesses(g.current_user)
    return ok([business.to_dict() for business in businesses])


@businesses_bp.get("/<id:business_id>")
@require_auth
def get_business_route(business_id: int):
    return ok(business_service.get_business(g.current_user, business_id).to_dict())


@businesses_bp.post("")
@require_auth
def create_business_route():
    business = business_service.create_business(g.current_user, json_body())
    return ok(business.to_dict())


@businesses_bp.put("/<id:business_id>")
@require_auth
def update_business_route(business_id: int):
    business = business_service.update_business(g.current_user, business_id, json_body())
    return ok(business.to_dict())


@businesses_bp.delete("/<id:business_id>")
@require_auth
def delete_business_route(business_id: int):
    return ok(business_service.delete_business(g.current_user, business_id))
