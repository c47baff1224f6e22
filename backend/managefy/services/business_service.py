# Overview: Service-layer operations for businesses (tenants); encapsulates business logic and database work.

"""
Business Service

Creating a business installs the creator as its manager in the same
transaction. Deletion is a soft delete, refused while the business still
owns live clients, suppliers, products or any sale; its user roles are
removed with it.
"""

from __future__ import annotations

import re

from flask import current_app

from ..errors import BadRequestError, UnauthorizedError
from ..extensions import db
from ..models import Business, Client, Product, Sale, Supplier, User, UserRole
from ..permissions import can_delete_business
from ..time_utils import utcnow
from ..validation import optional_text, require_text
from .concurrency import transactional
from . import membership_service, notification_service, permission_service


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*/?$")


def _normalize_slug(value) -> str:
    slug = require_text(value, "urlSlug", max_length=120).lower()
    if not SLUG_PATTERN.match(slug):
        raise BadRequestError(f"urlSlug bad formatted: {slug!r}")
    return slug


def _ensure_slug_free(slug: str, *, exclude_id: int | None = None) -> None:
    query = db.session.query(Business).filter(Business.url_slug == slug)
    if exclude_id is not None:
        query = query.filter(Business.id != exclude_id)
    if query.first():
        raise BadRequestError(f"urlSlug '{slug}' already taken")


def get_businesses(caller: User) -> list[Business]:
    """Live businesses in which the caller holds a role."""
    return (
        db.session.query(Business)
        .join(UserRole, UserRole.business_id == Business.id)
        .filter(UserRole.user_id == caller.id, Business.deletion_date.is_(None))
        .order_by(Business.id)
        .all()
    )


def get_business(caller: User, business_id: int) -> Business:
    permission_service.require_reader(caller, business_id)
    return permission_service.get_live_business(business_id)


@transactional
def create_business(caller: User, data: dict) -> Business:
    name = require_text(data.get("name"), "name", max_length=120)
    description = optional_text(data.get("description"), "description", max_length=2000)
    slug = _normalize_slug(data.get("urlSlug"))
    _ensure_slug_free(slug)

    business = Business(name=name, description=description, url_slug=slug)
    db.session.add(business)
    db.session.flush()

    membership_service.create_role_for_new_business(caller.id, business.id)

    notification_service.create_notification(
        caller.id,
        f"You created the business '{business.name}' successfully",
        notification_service.KIND_NORMAL,
    )
    current_app.logger.info("Business %s created by user %s", business.id, caller.id)
    return business


@transactional
def update_business(caller: User, business_id: int, data: dict) -> Business:
    permission_service.require_writer(caller, business_id)
    business = permission_service.get_live_business(business_id, lock=True)

    if "name" in data:
        business.name = require_text(data.get("name"), "name", max_length=120)
    if "description" in data:
        business.description = optional_text(data.get("description"), "description", max_length=2000)
    if "urlSlug" in data:
        slug = _normalize_slug(data.get("urlSlug"))
        _ensure_slug_free(slug, exclude_id=business.id)
        business.url_slug = slug

    db.session.flush()
    notification_service.create_notification(
        caller.id,
        f"You updated the business '{business.name}' successfully",
        notification_service.KIND_LOW,
    )
    return business


def _live_children(business_id: int) -> dict[str, int]:
    counts = {
        "clients": db.session.query(Client).filter(
            Client.business_id == business_id, Client.deletion_date.is_(None)).count(),
        "suppliers": db.session.query(Supplier).filter(
            Supplier.business_id == business_id, Supplier.deletion_date.is_(None)).count(),
        "products": db.session.query(Product).filter(
            Product.business_id == business_id, Product.deletion_date.is_(None)).count(),
        "sales": db.session.query(Sale).filter(Sale.business_id == business_id).count(),
    }
    return {kind: count for kind, count in counts.items() if count}


@transactional
def delete_business(caller: User, business_id: int) -> int:
    role = permission_service.resolve_role(caller, business_id, lock_business=True)
    if not can_delete_business(role.rank):
        raise UnauthorizedError("Only the manager can delete the business")

    children = _live_children(business_id)
    if children:
        summary = ", ".join(f"{count} {kind}" for kind, count in children.items())
        raise BadRequestError(f"The business still has live entities: {summary}")

    business = permission_service.get_live_business(business_id)
    db.session.query(UserRole).filter_by(business_id=business_id).delete()
    business.deletion_date = utcnow()

    notification_service.create_notification(
        caller.id,
        f"You deleted the business '{business.name}' successfully",
        notification_service.KIND_NORMAL,
    )
    current_app.logger.info("Business %s deleted by user %s", business_id, caller.id)
    return business_id
