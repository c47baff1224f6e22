# Overview: Service-layer operations for user accounts and email validation.

from __future__ import annotations

import secrets
import string
from datetime import timedelta

from flask import current_app

from ..errors import BadRequestError, UnauthorizedError
from ..extensions import db
from ..models import Notification, User, UserRole, UserValidation
from ..time_utils import utcnow
from ..validation import normalize_email, require_text
from .concurrency import transactional
from . import mail_service, notification_service


CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def get_users() -> list[User]:
    return db.session.query(User).order_by(User.id).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise BadRequestError(f"User with ID: {user_id} doesn't exist")
    return user


def require_self(caller: User, user_id: int) -> None:
    """Account operations only ever act on the caller's own account."""
    if caller.id != user_id:
        raise UnauthorizedError("You can only operate on your own user account")


@transactional
def update_user(caller: User, email, name) -> User:
    """
    Update the caller's email and name.

    The password hash is never touched on this path.
    """
    email = normalize_email(email)
    name = require_text(name, "name", max_length=120)

    taken = (
        db.session.query(User)
        .filter(User.email == email, User.id != caller.id)
        .first()
    )
    if taken:
        raise BadRequestError(f"Email '{email}' already taken")

    caller.email = email
    caller.name = name

    notification_service.create_notification(
        caller.id,
        "Your user account was updated successfully",
        notification_service.KIND_LOW,
    )
    return caller


@transactional
def generate_validation(caller: User) -> bool:
    """Create or replace the caller's validation code and email it."""
    if caller.validated:
        raise BadRequestError(f"User with ID: {caller.id} has already been validated")

    ttl = timedelta(minutes=current_app.config.get("VALIDATION_CODE_TTL_MINUTES", 15))
    code = generate_code()

    validation = db.session.query(UserValidation).filter_by(user_id=caller.id).first()
    if validation:
        validation.code = code
        validation.expiry_at = utcnow() + ttl
    else:
        validation = UserValidation(user_id=caller.id, code=code, expiry_at=utcnow() + ttl)
        db.session.add(validation)
    db.session.flush()

    mail_service.get_mail_client().send_code(caller.email, code)

    notification_service.create_notification(
        caller.id,
        "We sent you a code via email to verify your user account. Please check your inbox",
        notification_service.KIND_PRIORITY,
    )
    return True


@transactional
def validate_user(caller: User, code: str) -> bool:
    if caller.validated:
        raise BadRequestError(f"User with ID: {caller.id} has already been validated")

    validation = db.session.query(UserValidation).filter_by(user_id=caller.id).first()
    if not validation:
        raise BadRequestError(f"No validation code was generated for the User ID: {caller.id}")

    if not isinstance(code, str) or not secrets.compare_digest(validation.code, code.strip().upper()):
        raise UnauthorizedError(f"Validation code mismatch for the User ID: {caller.id}")
    if validation.expiry_at < utcnow():
        raise UnauthorizedError(f"Validation code has expired for the User ID: {caller.id}")

    caller.validated = True
    db.session.delete(validation)

    notification_service.create_notification(
        caller.id,
        "Your user has been correctly verified! You can now start operating with Managefy!",
        notification_service.KIND_NORMAL,
    )
    current_app.logger.info("User %s validated", caller.id)
    return True


@transactional
def delete_user(caller: User) -> int:
    """Hard-delete the caller, refused while they hold any role."""
    participations = db.session.query(UserRole).filter_by(user_id=caller.id).count()
    if participations:
        raise UnauthorizedError(
            "You have participation in one or more businesses. First leave or delete them."
        )

    user_id = caller.id
    db.session.query(UserValidation).filter_by(user_id=user_id).delete()
    db.session.query(Notification).filter_by(user_id=user_id).delete()
    db.session.delete(caller)

    current_app.logger.info("Deleted user %s", user_id)
    return user_id
