from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from ..extensions import db
from ..time_utils import to_utc_z


CENTS = Decimal("0.01")


class Sale(db.Model):
    """
    Sale aggregate root. Lines are only reachable through the sale.

    total_price is always recomputed from the lines (see recalculate_total);
    a client-supplied total is never stored.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_business_date", "business_id", "date"),
        db.CheckConstraint("total_price >= 0", name="ck_sales_total_non_negative"),
        db.CheckConstraint(
            "partial_payment IS NULL OR (partial_payment >= 0 AND partial_payment <= total_price)",
            name="ck_sales_partial_payment_range",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime, nullable=False)
    total_price = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    partial_payment = db.Column(db.Numeric(12, 2), nullable=True)

    # Cancelled, PendingPayment, PartialPayment, Payed, PayedAndBilled
    state = db.Column(db.String(24), nullable=False, index=True)

    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id"), nullable=True, index=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    business = db.relationship("Business", backref=db.backref("sales", lazy=True))
    client = db.relationship("Client")
    lines = db.relationship(
        "SaleLine",
        back_populates="sale",
        order_by="SaleLine.line_no",
        cascade="all, delete-orphan",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def recalculate_total(self) -> Decimal:
        self.total_price = sum((line.subtotal for line in self.lines), Decimal("0.00"))
        return self.total_price

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "totalPrice": self.total_price,
            "partialPayment": self.partial_payment,
            "state": self.state,
            "businessId": self.business_id,
            "clientId": self.client_id,
            "lines": [line.to_dict() for line in self.lines],
        }


class SaleLine(db.Model):
    """Line item of a sale; line numbers are dense (1..n) within the sale."""
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.UniqueConstraint("sale_id", "line_no", name="uq_sale_lines_sale_line_no"),
        db.CheckConstraint("quantity >= 1", name="ck_sale_lines_quantity_positive"),
        db.CheckConstraint(
            "discount_coefficient IS NULL OR (discount_coefficient > 0 AND discount_coefficient <= 1)",
            name="ck_sale_lines_discount_range",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    line_no = db.Column(db.Integer, nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    unit_cost = db.Column(db.Numeric(12, 2), nullable=False)
    discount_coefficient = db.Column(db.Numeric(5, 4), nullable=True)

    sale = db.relationship("Sale", back_populates="lines")
    product = db.relationship("Product")

    @property
    def subtotal(self) -> Decimal:
        """quantity x unit_price x (discount or 1), rounded half-up to cents."""
        coefficient = self.discount_coefficient if self.discount_coefficient is not None else Decimal(1)
        raw = Decimal(self.quantity) * Decimal(self.unit_price) * Decimal(coefficient)
        return raw.quantize(CENTS, rounding=ROUND_HALF_UP)

    def to_dict(self) -> dict:
        return {
            "saleId": self.sale_id,
            "lineNo": self.line_no,
            "productId": self.product_id,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "unitCost": self.unit_cost,
            "discountCoefficient": self.discount_coefficient,
            "subtotal": self.subtotal,
        }
