# Overview: Service-layer operations for notifications; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import BadRequestError, UnauthorizedError
from ..extensions import db
from ..models import Notification
from ..time_utils import utcnow
from .concurrency import transactional


KIND_LOW = "Low"
KIND_NORMAL = "Normal"
KIND_PRIORITY = "Priority"
VALID_KINDS = (KIND_LOW, KIND_NORMAL, KIND_PRIORITY)

STATE_UNREAD = "Unread"
STATE_READ = "Read"
STATE_CLOSED = "Closed"
VALID_STATES = (STATE_UNREAD, STATE_READ, STATE_CLOSED)

# Single forward steps only
NEXT_STATE = {
    STATE_UNREAD: STATE_READ,
    STATE_READ: STATE_CLOSED,
}


def _parse_state(text: str | None) -> str:
    if isinstance(text, str):
        for state in VALID_STATES:
            if state.lower() == text.strip().lower():
                return state
    raise BadRequestError(f"Invalid notification state: {text}")


def create_notification(user_id: int, message: str, kind: str = KIND_NORMAL) -> Notification:
    """
    Record a notification for a user inside the caller's transaction.

    Internal to the core: there is no public endpoint that creates
    notifications. Flushes but never commits.
    """
    if kind not in VALID_KINDS:
        raise ValueError(f"Unknown notification kind: {kind}")

    notification = Notification(
        user_id=user_id,
        message=message,
        kind=kind,
        state=STATE_UNREAD,
        created_at=utcnow(),
    )
    db.session.add(notification)
    db.session.flush()
    return notification


def get_notifications_by_user(caller, user_id: int) -> list[Notification]:
    if caller.id != user_id:
        raise UnauthorizedError("You can only read your own notifications")

    return (
        db.session.query(Notification)
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def _get_owned(caller, notification_id: int) -> Notification:
    notification = db.session.get(Notification, notification_id)
    if not notification:
        raise BadRequestError(f"Notification with ID: {notification_id} doesn't exist")
    if notification.user_id != caller.id:
        raise UnauthorizedError("The notification belongs to another user")
    return notification


def get_notification(caller, notification_id: int) -> Notification:
    return _get_owned(caller, notification_id)


@transactional
def update_notification_state(caller, notification_id: int, state_text: str) -> Notification:
    new_state = _parse_state(state_text)
    notification = _get_owned(caller, notification_id)

    if NEXT_STATE.get(notification.state) != new_state:
        raise BadRequestError(
            f"Invalid notification state transition: {notification.state} -> {new_state}"
        )

    notification.state = new_state
    return notification


@transactional
def delete_notification(caller, notification_id: int) -> int:
    notification = _get_owned(caller, notification_id)
    db.session.delete(notification)
    return notification_id
