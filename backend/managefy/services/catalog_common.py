# Overview: Helpers shared by the client, supplier and product services.

from __future__ import annotations

from ..errors import BadRequestError
from ..extensions import db
from ..validation import optional_email, optional_text, require_int, require_text


def get_live(model, entity_id: int, label: str, *, lock: bool = False):
    """Fetch a non-tombstoned catalog row or raise BadRequest."""
    query = db.session.query(model).filter(
        model.id == entity_id,
        model.deletion_date.is_(None),
    )
    if lock:
        query = query.with_for_update()
    entity = query.first()
    if not entity:
        raise BadRequestError(f"{label} with ID: {entity_id} doesn't exist")
    return entity


def list_live(model, business_id: int) -> list:
    return (
        db.session.query(model)
        .filter(model.business_id == business_id, model.deletion_date.is_(None))
        .order_by(model.id)
        .all()
    )


def require_business_id(data: dict) -> int:
    return require_int(data.get("businessId"), "businessId", minimum=1)


def contact_patch(data: dict, *, partial: bool) -> dict:
    """
    Validate name/description/email/phone for clients and suppliers.

    partial=False: create semantics (name required)
    partial=True: only keys present in data are returned
    """
    patch = {}
    if not partial or "name" in data:
        patch["name"] = require_text(data.get("name"), "name", max_length=120)
    if not partial or "description" in data:
        patch["description"] = optional_text(data.get("description"), "description", max_length=2000)
    if not partial or "email" in data:
        patch["email"] = optional_email(data.get("email"))
    if not partial or "phone" in data:
        patch["phone"] = optional_text(data.get("phone"), "phone", max_length=32)
    return patch
