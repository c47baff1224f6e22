# Overview: Flask API routes for sales; parses input and returns envelopes.

# backend/managefy/routes/sales.py
"""
Sales API routes

Mutations run through run_with_retry: a sale row is versioned, so a
concurrent writer surfaces as StaleDataError and the whole operation is
replayed against fresh state.
"""

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..responses import json_body, ok, required_arg_int
from ..services import sales_service
from ..services.concurrency import run_with_retry


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@require_auth
def list_sales_route():
    sales = sales_service.get_sales(g.current_user, required_arg_int("businessId"))
    return ok([sale.to_dict() for sale in sales])


@sales_bp.get("/interval")
@require_auth
def list_sales_by_interval_route():
    sales = sales_service.get_sales_by_interval(
        g.current_user,
        required_arg_int("businessId"),
        request.args.get("from"),
        request.args.get("to"),
    )
    return ok([sale.to_dict() for sale in sales])


@sales_bp.get("/<id:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    return ok(sales_service.get_sale(g.current_user, sale_id).to_dict())


@sales_bp.post("")
@require_auth
def create_sale_route():
    data = json_body()
    sale = run_with_retry(lambda: sales_service.create_sale(g.current_user, data))
    return ok(sale.to_dict())


@sales_bp.put("/<id:sale_id>")
@require_auth
def update_sale_route(sale_id: int):
    data = json_body()
    sale = run_with_retry(lambda: sales_service.update_sale(g.current_user, sale_id, data))
    return ok(sale.to_dict())


@sales_bp.put("/<id:sale_id>/state/<state>")
@require_auth
def update_sale_state_route(sale_id: int, state: str):
    sale = run_with_retry(lambda: sales_service.update_sale_state(g.current_user, sale_id, state))
    return ok(sale.to_dict())


@sales_bp.put("/<id:sale_id>/partialPayment/<amount>")
@require_auth
def update_sale_partial_payment_route(sale_id: int, amount: str):
    sale = run_with_retry(
        lambda: sales_service.update_sale_partial_payment(g.current_user, sale_id, amount)
    )
    return ok(sale.to_dict())


@sales_bp.delete("/<id:sale_id>")
@require_auth
def cancel_sale_route(sale_id: int):
    sale = run_with_retry(lambda: sales_service.cancel_sale(g.current_user, sale_id))
    return ok(sale.to_dict())
