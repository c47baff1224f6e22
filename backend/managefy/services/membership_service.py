# Overview: Service-layer operations for user roles (membership); encapsulates business logic and database work.

"""
Membership Service

Creates, updates, transfers and removes the user-role bindings of a
business. All mutations lock the business row before reading roles so
the one-manager invariant holds under concurrent requests, and each one
notifies the users involved inside the same transaction.

Predicates (see managefy.permissions.rules):
- a role can only be granted by a strictly higher role
- manager is never granted here, only moved by transfer
- the manager's role can't be updated or deleted, only transferred
"""

from __future__ import annotations

from flask import current_app

from ..errors import BadRequestError, UnauthorizedError
from ..extensions import db
from ..models import Business, User, UserRole
from ..permissions import Role, can_grant, can_modify
from .concurrency import transactional
from . import notification_service, permission_service, user_service


def get_user_roles(caller: User) -> list[UserRole]:
    """All live roles of the caller."""
    return (
        db.session.query(UserRole)
        .join(Business, Business.id == UserRole.business_id)
        .filter(UserRole.user_id == caller.id, Business.deletion_date.is_(None))
        .order_by(UserRole.business_id)
        .all()
    )


def get_roles_by_business(caller: User, business_id: int) -> list[UserRole]:
    permission_service.require_reader(caller, business_id)
    return (
        db.session.query(UserRole)
        .filter_by(business_id=business_id)
        .order_by(UserRole.user_id)
        .all()
    )


def _get_other_role(user_id: int, business_id: int) -> UserRole:
    role = db.session.get(UserRole, (user_id, business_id))
    if not role:
        raise BadRequestError(
            f"User with ID: {user_id} doesn't have a role in the business with ID: {business_id}"
        )
    return role


def get_role(caller: User, business_id: int, user_id: int) -> UserRole:
    permission_service.require_reader(caller, business_id)
    return _get_other_role(user_id, business_id)


@transactional
def create_role(caller: User, target_user_id: int, business_id: int, role_text: str) -> UserRole:
    caller_role = permission_service.resolve_role(caller, business_id, lock_business=True)
    produced = Role.from_text(role_text)

    if produced == Role.MANAGER:
        raise UnauthorizedError("Can't create another manager role! Transfer it instead")
    if not can_grant(caller_role.rank, produced):
        raise UnauthorizedError(
            f"Your role '{caller_role.role}' can't grant the role '{produced.label}'"
        )

    target = user_service.get_user(target_user_id)
    if target.id == caller.id:
        raise BadRequestError("You can't create a role for yourself")
    if db.session.get(UserRole, (target.id, business_id)):
        raise BadRequestError(
            f"User with ID: {target.id} already has a role in the business with ID: {business_id}"
        )

    user_role = UserRole(user_id=target.id, business_id=business_id, role=produced.label)
    db.session.add(user_role)
    db.session.flush()

    notification_service.create_notification(
        caller.id,
        f"You granted the role '{produced.label}' for the user '{target.email}' successfully",
        notification_service.KIND_LOW,
    )
    notification_service.create_notification(
        target.id,
        f"The user '{caller.email}' granted you the role '{produced.label}'",
        notification_service.KIND_NORMAL,
    )
    return user_role


def create_role_for_new_business(user_id: int, business_id: int) -> UserRole:
    """Install the creator as the sole manager; joins the business creation transaction."""
    user_role = UserRole(user_id=user_id, business_id=business_id, role=Role.MANAGER.label)
    db.session.add(user_role)
    db.session.flush()
    return user_role


@transactional
def update_role(caller: User, target_user_id: int, business_id: int, role_text: str) -> UserRole:
    caller_role = permission_service.resolve_role(caller, business_id, lock_business=True)
    produced = Role.from_text(role_text)

    if target_user_id == caller.id:
        raise BadRequestError("You can't update your own role")

    target = user_service.get_user(target_user_id)
    target_role = _get_other_role(target.id, business_id)

    if target_role.is_manager:
        raise UnauthorizedError("The manager role can only change through a transfer")
    if produced == Role.MANAGER:
        raise UnauthorizedError("Can't grant the manager role! Transfer it instead")
    if not can_modify(caller_role.rank, target_role.rank):
        raise UnauthorizedError(
            f"Your role '{caller_role.role}' can't update a '{target_role.role}' role"
        )
    if not can_grant(caller_role.rank, produced):
        raise UnauthorizedError(
            f"Your role '{caller_role.role}' can't grant the role '{produced.label}'"
        )

    target_role.role = produced.label
    db.session.flush()

    notification_service.create_notification(
        caller.id,
        f"You granted the role '{produced.label}' for the user '{target.email}' successfully",
        notification_service.KIND_LOW,
    )
    notification_service.create_notification(
        target.id,
        f"The user '{caller.email}' granted you the role '{produced.label}'",
        notification_service.KIND_NORMAL,
    )
    return target_role


@transactional
def transfer_manager(caller: User, target_user_id: int, business_id: int) -> UserRole:
    """Atomically make the target manager and degrade the caller to admin."""
    caller_role = permission_service.resolve_role(caller, business_id, lock_business=True)
    target = user_service.get_user(target_user_id)
    target_role = _get_other_role(target.id, business_id)

    if target_role.is_manager:
        raise UnauthorizedError("The other user is the manager already!")
    if not caller_role.is_manager:
        raise UnauthorizedError("You don't have a manager role to transfer")

    # Demote first: the partial unique index allows one manager row at a time
    caller_role.role = Role.ADMIN.label
    db.session.flush()
    target_role.role = Role.MANAGER.label
    db.session.flush()

    notification_service.create_notification(
        caller.id,
        f"You transferred the role 'manager' to the user '{target.email}' successfully",
        notification_service.KIND_NORMAL,
    )
    notification_service.create_notification(
        target.id,
        f"The user '{caller.email}' transferred to you the role 'manager'",
        notification_service.KIND_NORMAL,
    )
    current_app.logger.info("Business %s manager transferred from %s to %s", business_id, caller.id, target.id)
    return target_role


@transactional
def delete_role(caller: User, target_user_id: int, business_id: int) -> dict:
    caller_role = permission_service.resolve_role(caller, business_id, lock_business=True)

    if target_user_id == caller.id:
        raise BadRequestError("Use leave to remove your own role")

    target = user_service.get_user(target_user_id)
    target_role = _get_other_role(target.id, business_id)

    if target_role.is_manager:
        raise UnauthorizedError("Can't delete the manager role!")
    if not can_modify(caller_role.rank, target_role.rank):
        raise UnauthorizedError(
            f"Your role '{caller_role.role}' can't delete a '{target_role.role}' role"
        )

    key = {"userId": target.id, "businessId": business_id}
    db.session.delete(target_role)
    db.session.flush()

    notification_service.create_notification(
        caller.id,
        f"You deleted the role of the user '{target.email}' successfully",
        notification_service.KIND_NORMAL,
    )
    notification_service.create_notification(
        target.id,
        f"The user '{caller.email}' has deleted your role!",
        notification_service.KIND_PRIORITY,
    )
    return key


@transactional
def leave_business(caller: User, business_id: int) -> dict:
    caller_role = permission_service.resolve_role(caller, business_id, lock_business=True)

    if caller_role.is_manager:
        raise UnauthorizedError("First you need to transfer the manager role to other user!")

    key = {"userId": caller.id, "businessId": business_id}
    db.session.delete(caller_role)
    db.session.flush()

    notification_service.create_notification(
        caller.id,
        "You left your role successfully",
        notification_service.KIND_NORMAL,
    )
    return key
