# Overview: Resolves the caller's role in a business and enforces role predicates.

"""
Permission Service

Every business-scoped operation starts with resolve_role(). A caller with
no role in the business, or a business that was soft-deleted, is
Unauthorized; the two cases are deliberately not distinguished.
"""

from __future__ import annotations

from ..errors import UnauthorizedError
from ..extensions import db
from ..models import Business, UserRole
from ..permissions import Role, can_read, can_write_catalog
from .concurrency import lock_for_update


def get_live_business(business_id: int, *, lock: bool = False) -> Business | None:
    query = db.session.query(Business).filter(
        Business.id == business_id,
        Business.deletion_date.is_(None),
    )
    if lock:
        query = lock_for_update(query)
    return query.first()


def resolve_role(caller, business_id: int, *, lock_business: bool = False) -> UserRole:
    """
    Return the caller's role in the business.

    lock_business takes a row lock on the business first; role mutations
    use it so concurrent transfers can't produce two managers.
    """
    business = get_live_business(business_id, lock=lock_business)
    if not business:
        raise UnauthorizedError(f"You don't have access to the business with ID: {business_id}")

    role = db.session.get(UserRole, (caller.id, business_id))
    if not role:
        raise UnauthorizedError(f"You don't have access to the business with ID: {business_id}")
    return role


def require_reader(caller, business_id: int) -> UserRole:
    role = resolve_role(caller, business_id)
    if not can_read(role.rank):
        raise UnauthorizedError("Your role can't read this business")
    return role


def require_writer(caller, business_id: int) -> UserRole:
    role = resolve_role(caller, business_id)
    if not can_write_catalog(role.rank):
        raise UnauthorizedError("You need an admin or manager role for this operation")
    return role


def require_manager(caller, business_id: int) -> UserRole:
    role = resolve_role(caller, business_id)
    if role.rank != Role.MANAGER:
        raise UnauthorizedError("Only the manager can perform this operation")
    return role
