# Overview: Service-layer operations for suppliers; encapsulates business logic and database work.

from __future__ import annotations

from ..extensions import db
from ..models import Supplier, User
from ..time_utils import utcnow
from .catalog_common import contact_patch, get_live, list_live, require_business_id
from .concurrency import transactional
from . import permission_service


def get_suppliers(caller: User, business_id: int) -> list[Supplier]:
    permission_service.require_reader(caller, business_id)
    return list_live(Supplier, business_id)


def get_supplier(caller: User, supplier_id: int) -> Supplier:
    supplier = get_live(Supplier, supplier_id, "Supplier")
    permission_service.require_reader(caller, supplier.business_id)
    return supplier


@transactional
def create_supplier(caller: User, data: dict) -> Supplier:
    business_id = require_business_id(data)
    permission_service.require_writer(caller, business_id)

    supplier = Supplier(business_id=business_id, **contact_patch(data, partial=False))
    db.session.add(supplier)
    db.session.flush()
    return supplier


@transactional
def update_supplier(caller: User, supplier_id: int, data: dict) -> Supplier:
    supplier = get_live(Supplier, supplier_id, "Supplier", lock=True)
    permission_service.require_writer(caller, supplier.business_id)

    for key, value in contact_patch(data, partial=True).items():
        setattr(supplier, key, value)
    db.session.flush()
    return supplier


@transactional
def delete_supplier(caller: User, supplier_id: int) -> int:
    supplier = get_live(Supplier, supplier_id, "Supplier", lock=True)
    permission_service.require_writer(caller, supplier.business_id)

    supplier.deletion_date = utcnow()
    return supplier_id
