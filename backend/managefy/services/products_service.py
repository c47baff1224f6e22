# Overview: Service-layer operations for products; encapsulates business logic and database work.

"""
Product Service

Products are business-scoped and soft-deleted. Price invariants are
checked here before they reach the table constraints:
- unit_cost >= 0
- unit_price >= unit_cost
- stock >= 0 (advisory; sales don't decrement it)

A supplier, when given, must be a live supplier of the same business.
Product codes are unique among the live products of a business.
"""

from __future__ import annotations

from ..errors import BadRequestError
from ..extensions import db
from ..models import Product, Supplier, User
from ..time_utils import utcnow
from ..validation import optional_int, optional_text, require_int, require_money, require_text
from .catalog_common import get_live, list_live, require_business_id
from .concurrency import transactional
from . import permission_service


def get_products(caller: User, business_id: int) -> list[Product]:
    permission_service.require_reader(caller, business_id)
    return list_live(Product, business_id)


def get_product(caller: User, product_id: int) -> Product:
    product = get_live(Product, product_id, "Product")
    permission_service.require_reader(caller, product.business_id)
    return product


def _validate_supplier(supplier_id, business_id: int) -> int | None:
    if supplier_id is None:
        return None
    supplier_id = require_int(supplier_id, "supplierId", minimum=1)
    supplier = get_live(Supplier, supplier_id, "Supplier")
    if supplier.business_id != business_id:
        raise BadRequestError(f"Supplier with ID: {supplier_id} belongs to another business")
    return supplier_id


def _ensure_code_free(code: str, business_id: int, *, exclude_id: int | None = None) -> None:
    query = db.session.query(Product).filter(
        Product.business_id == business_id,
        Product.code == code,
        Product.deletion_date.is_(None),
    )
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise BadRequestError(f"Product code '{code}' already exists in this business")


def _product_patch(data: dict, business_id: int, *, partial: bool) -> dict:
    patch = {}
    if not partial or "code" in data:
        patch["code"] = require_text(data.get("code"), "code", max_length=32).upper()
    if not partial or "name" in data:
        patch["name"] = require_text(data.get("name"), "name", max_length=120)
    if not partial or "description" in data:
        patch["description"] = optional_text(data.get("description"), "description", max_length=2000)
    if not partial or "unitCost" in data:
        patch["unit_cost"] = require_money(data.get("unitCost"), "unitCost")
    if not partial or "unitPrice" in data:
        patch["unit_price"] = require_money(data.get("unitPrice"), "unitPrice")
    if not partial or "stock" in data:
        patch["stock"] = require_int(data.get("stock", 0), "stock", minimum=0)
    if not partial or "minStock" in data:
        patch["min_stock"] = optional_int(data.get("minStock"), "minStock", minimum=0)
    if not partial or "expirationDays" in data:
        patch["expiration_days"] = optional_int(data.get("expirationDays"), "expirationDays", minimum=0)
    if not partial or "supplierId" in data:
        patch["supplier_id"] = _validate_supplier(data.get("supplierId"), business_id)
    return patch


def _check_prices(unit_cost, unit_price) -> None:
    if unit_price < unit_cost:
        raise BadRequestError("unitPrice must be greater than or equal to unitCost")


@transactional
def create_product(caller: User, data: dict) -> Product:
    business_id = require_business_id(data)
    permission_service.require_writer(caller, business_id)

    patch = _product_patch(data, business_id, partial=False)
    _check_prices(patch["unit_cost"], patch["unit_price"])
    _ensure_code_free(patch["code"], business_id)

    product = Product(business_id=business_id, **patch)
    db.session.add(product)
    db.session.flush()
    return product


@transactional
def update_product(caller: User, product_id: int, data: dict) -> Product:
    product = get_live(Product, product_id, "Product", lock=True)
    permission_service.require_writer(caller, product.business_id)

    patch = _product_patch(data, product.business_id, partial=True)
    _check_prices(
        patch.get("unit_cost", product.unit_cost),
        patch.get("unit_price", product.unit_price),
    )
    if "code" in patch:
        _ensure_code_free(patch["code"], product.business_id, exclude_id=product.id)

    for key, value in patch.items():
        setattr(product, key, value)
    db.session.flush()
    return product


@transactional
def delete_product(caller: User, product_id: int) -> int:
    product = get_live(Product, product_id, "Product", lock=True)
    permission_service.require_writer(caller, product.business_id)

    product.deletion_date = utcnow()
    return product_id
