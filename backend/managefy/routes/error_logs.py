# Overview: Flask API routes for the error log.

from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import json_body, ok
from ..services import error_log_service


error_logs_bp = Blueprint("error_logs", __name__, url_prefix="/api/errorLogs")


@error_logs_bp.get("")
@require_auth
def list_error_logs_route():
    limit = request.args.get("limit", type=int)
    return ok([entry.to_dict() for entry in error_log_service.get_error_logs(limit)])


@error_logs_bp.post("")
@require_auth
def report_client_error_route():
    data = json_body()
    entry = error_log_service.report_client_error(data.get("description"), data.get("code"))
    return ok(entry.to_dict())
