# Overview: Flask API routes for products; parses input and returns envelopes.

from flask import Blueprint, g

from ..decorators import require_auth
from ..responses import json_body, ok, required_arg_int
from ..services import products_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products_route():
    products = products_service.get_products(g.current_user, required_arg_int("businessId"))
    return ok([product.to_dict() for product in products])


@products_bp.get("/<id:product_id>")
@require_auth
def get_product_route(product_id: int):
    return ok(products_service.get_product(g.current_user, product_id).to_dict())


@products_bp.post("")
@require_auth
def create_product_route():
    product = products_service.create_product(g.current_user, json_body())
    return ok(product.to_dict())


@products_bp.put("/<id:product_id>")
@require_auth
def update_product_route(product_id: int):
    product = products_service.update_product(g.current_user, product_id, json_body())
    return ok(product.to_dict())


@products_bp.delete("/<id:product_id>")
@require_auth
def delete_product_route(product_id: int):
    return ok(products_service.delete_product(g.current_user, product_id))
