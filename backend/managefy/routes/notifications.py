# Overview: Flask API routes for notifications; owner-only reads and state changes.

from flask import Blueprint, g

from ..decorators import require_auth
from ..responses import ok
from ..services import notification_service


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("/user/<id:user_id>")
@require_auth
def list_user_notifications_route(user_id: int):
    notifications = notification_service.get_notifications_by_user(g.current_user, user_id)
    return ok([notification.to_dict() for notification in notifications])


@notifications_bp.get("/<id:notification_id>")
@require_auth
def get_notification_route(notification_id: int):
    return ok(notification_service.get_notification(g.current_user, notification_id).to_dict())


@notifications_bp.put("/<id:notification_id>/state/<state>")
@require_auth
def update_notification_state_route(notification_id: int, state: str):
    notification = notification_service.update_notification_state(
        g.current_user, notification_id, state
    )
    return ok(notification.to_dict())


@notifications_bp.delete("/<id:notification_id>")
@require_auth
def delete_notification_route(notification_id: int):
    return ok(notification_service.delete_notification(g.current_user, notification_id))
