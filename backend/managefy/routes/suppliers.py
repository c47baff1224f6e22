# Overview: Flask API routes for suppliers; parses input and returns envelopes.

from flask import Blueprint, g

from ..decorators import require_auth
from ..responses import json_body, ok, required_arg_int
from ..services import supplier_service


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@require_auth
def list_suppliers_route():
    suppliers = supplier_service.get_suppliers(g.current_user, required_arg_int("businessId"))
    return ok([supplier.to_dict() for supplier in suppliers])


@suppliers_bp.get("/<id:supplier_id>")
@require_auth
def get_supplier_route(supplier_id: int):
    return ok(supplier_service.get_supplier(g.current_user, supplier_id).to_dict())


@suppliers_bp.post("")
@require_auth
def create_supplier_route():
    supplier = supplier_service.create_supplier(g.current_user, json_body())
    return ok(supplier.to_dict())


@suppliers_bp.put("/<id:supplier_id>")
@require_auth
def update_supplier_route(supplier_id: int):
    supplier = supplier_service.update_supplier(g.current_user, supplier_id, json_body())
    return ok(supplier.to_dict())


@suppliers_bp.delete("/<id:supplier_id>")
@require_auth
def delete_supplier_route(supplier_id: int):
    return ok(supplier_service.delete_supplier(g.current_user, supplier_id))
