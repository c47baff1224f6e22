# Overview: Flask API routes for clients; parses input and returns envelopes.

from flask import Blueprint, g

from ..decorators import require_auth
from ..responses import json_body, ok, required_arg_int
from ..services import client_service


clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
@require_auth
def list_clients_route():
    clients = client_service.get_clients(g.current_user, required_arg_int("businessId"))
    return ok([client.to_dict() for client in clients])


@clients_bp.get("/<id:client_id>")
@require_auth
def get_client_route(client_id: int):
    return ok(client_service.get_client(g.current_user, client_id).to_dict())


@clients_bp.post("")
@require_auth
def create_client_route():
    client = client_service.create_client(g.current_user, json_body())
    return ok(client.to_dict())


@clients_bp.put("/<id:client_id>")
@require_auth
def update_client_route(client_id: int):
    client = client_service.update_client(g.current_user, client_id, json_body())
    return ok(client.to_dict())


@clients_bp.delete("/<id:client_id>")
@require_auth
def delete_client_route(client_id: int):
    return ok(client_service.delete_client(g.current_user, client_id))
