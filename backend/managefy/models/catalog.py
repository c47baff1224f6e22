from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Client(db.Model):
    """Customer of a business. Soft-deleted through deletion_date."""
    __tablename__ = "clients"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    deletion_date = db.Column(db.DateTime, nullable=True)

    business = db.relationship("Business", backref=db.backref("clients", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "email": self.email,
            "phone": self.phone,
            "businessId": self.business_id,
            "deletionDate": to_utc_z(self.deletion_date),
        }


class Supplier(db.Model):
    """Vendor a business buys products from. Soft-deleted through deletion_date."""
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    deletion_date = db.Column(db.DateTime, nullable=True)

    business = db.relationship("Business", backref=db.backref("suppliers", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "email": self.email,
            "phone": self.phone,
            "businessId": self.business_id,
            "deletionDate": to_utc_z(self.deletion_date),
        }


class Product(db.Model):
    """
    Sellable item of a business.

    Prices are fixed-point: unit_price >= unit_cost >= 0. Stock is
    advisory and is not decremented by sales.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("unit_cost >= 0", name="ck_products_unit_cost_non_negative"),
        db.CheckConstraint("unit_price >= unit_cost", name="ck_products_price_covers_cost"),
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_business_code", "business_id", "code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    unit_cost = db.Column(db.Numeric(12, 2), nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=True)
    expiration_days = db.Column(db.Integer, nullable=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    deletion_date = db.Column(db.DateTime, nullable=True)

    supplier = db.relationship("Supplier")
    business = db.relationship("Business", backref=db.backref("products", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "unitCost": self.unit_cost,
            "unitPrice": self.unit_price,
            "stock": self.stock,
            "minStock": self.min_stock,
            "expirationDays": self.expiration_days,
            "supplierId": self.supplier_id,
            "businessId": self.business_id,
            "deletionDate": to_utc_z(self.deletion_date),
        }
