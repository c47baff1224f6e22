# Overview: Deterministic demo fixture inserted when migrations.run is enabled.

"""
Seed Service

Populates a clean database with two businesses, two users, three
suppliers, three clients, nine products, two sales with lines, demo
notifications and error logs. Refuses to touch a database that already
holds users or businesses, so running it twice is a no-op.
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..models import (
    Business, Client, ErrorLog, Notification, Product, Sale, SaleLine, Supplier, User, UserRole,
)
from ..permissions import Role
from ..time_utils import utcnow
from .auth_service import hash_password
from .error_log_service import ORIGIN_BACKEND
from .notification_service import (
    KIND_LOW, KIND_NORMAL, KIND_PRIORITY, STATE_CLOSED, STATE_READ, STATE_UNREAD,
)
from .sales_service import STATE_PENDING_PAYMENT


# (code, name, description, unit_cost, unit_price, stock, min_stock, expiration_days, supplier_idx, business_idx)
PRODUCTS = [
    ("S01", "Soda (Big)", "Soda 2L", "100", "130", 10, 4, None, 0, 0),
    ("S02", "Soda (Medium)", "Soda 1L", "60", "80", 10, 4, None, 0, 0),
    ("S03", "Soda (Small)", "Soda 500ml", "35", "50", 20, 8, None, 0, 0),
    ("N01", "Doritos", "Pack of doritos", "60", "80", 20, None, None, 0, 0),
    ("D01", "Milk 1L", "Regular milk", "30", "40", 10, None, None, 2, 0),
    ("D02", "Diet Yogurt", "Yogurt with less sugar", "30", "40", 20, None, None, 2, 0),
    ("M01", "Egg", "Just an egg", "200", "260", 10, None, 6, 1, 1),
    ("M02", "Meat 1KG", "Roast beef", "200", "260", 20, 4, 2, 1, 1),
    ("M03", "Chicken 1KG", "Chicken leg & thigh", "150", "200", 20, 4, 2, 1, 1),
]


def database_is_empty() -> bool:
    return (
        db.session.query(User).first() is None
        and db.session.query(Business).first() is None
    )


def seed_demo_data() -> bool:
    """Insert the fixture. Returns False (and does nothing) on a populated database."""
    if not database_is_empty():
        current_app.logger.info("Database already populated; skipping demo seed")
        return False

    businesses = [
        Business(name="Groceryfy", description="Buy everything", url_slug="groceryfy/"),
        Business(name="Dean's Butchery", description="The best meat", url_slug="deans-butchery/"),
    ]
    db.session.add_all(businesses)

    users = [
        User(email="johndoe@mail.com", password_hash=hash_password("Java1234"), name="John Doe", validated=True),
        User(email="janedoe@mail.com", password_hash=hash_password("Script1234"), name="Jane Doe", validated=False),
    ]
    db.session.add_all(users)
    db.session.flush()

    db.session.add_all([
        UserRole(user_id=users[0].id, business_id=businesses[0].id, role=Role.MANAGER.label),
        UserRole(user_id=users[1].id, business_id=businesses[1].id, role=Role.MANAGER.label),
    ])

    clients = [
        Client(name="Nick A", description="Regular client", email="anick@mail.com", phone="123456",
               business_id=businesses[0].id),
        Client(name="Alex R", description="Regular client", email="ralex@mail.com", phone="112233",
               business_id=businesses[0].id),
        Client(name="Joseph A", description="Regular client", email="ajoseph@mail.com", phone="445566",
               business_id=businesses[0].id),
    ]
    suppliers = [
        Supplier(name="Pep S I", description="Snacks & soda", email="sipep@mail.com", phone="111222",
                 business_id=businesses[0].id),
        Supplier(name="Butch E R", description="Red meat, chicken & eggs", email="erbutch@mail.com",
                 phone="333444", business_id=businesses[1].id),
        Supplier(name="Dai R Y", description="Milk products", email="rydai@mail.com", phone="555666",
                 business_id=businesses[0].id),
    ]
    db.session.add_all(clients + suppliers)
    db.session.flush()

    products = []
    for code, name, description, cost, price, stock, min_stock, expiration, supplier_idx, business_idx in PRODUCTS:
        products.append(Product(
            code=code,
            name=name,
            description=description,
            unit_cost=Decimal(cost),
            unit_price=Decimal(price),
            stock=stock,
            min_stock=min_stock,
            expiration_days=expiration,
            supplier_id=suppliers[supplier_idx].id,
            business_id=businesses[business_idx].id,
        ))
    db.session.add_all(products)
    db.session.flush()

    # Sale 1 - Soda & Doritos; Sale 2 - Chicken & Eggs with 10% off
    discount = Decimal("0.9")
    sale_specs = [
        (businesses[0], clients[0], [(products[0], 1, None), (products[3], 1, None)]),
        (businesses[1], None, [(products[8], 1, discount), (products[6], 6, discount)]),
    ]
    for business, client, line_specs in sale_specs:
        sale = Sale(
            date=utcnow(),
            business_id=business.id,
            client_id=client.id if client else None,
            state=STATE_PENDING_PAYMENT,
        )
        sale.lines = [
            SaleLine(
                line_no=line_no,
                product_id=product.id,
                quantity=quantity,
                unit_price=product.unit_price,
                unit_cost=product.unit_cost,
                discount_coefficient=coefficient,
            )
            for line_no, (product, quantity, coefficient) in enumerate(line_specs, start=1)
        ]
        sale.recalculate_total()
        db.session.add(sale)

    now = utcnow()
    db.session.add_all([
        Notification(user_id=users[0].id, message="You made 10 sales this week, 2 more than the previous",
                     kind=KIND_LOW, state=STATE_READ, created_at=now),
        Notification(user_id=users[0].id, message="The sale has been completed successfully",
                     kind=KIND_LOW, state=STATE_CLOSED, created_at=now),
        Notification(user_id=users[0].id, message="An admin has removed you from the 'MinShop' business",
                     kind=KIND_PRIORITY, state=STATE_UNREAD, created_at=now),
        Notification(user_id=users[0].id, message="Minimum storage for Soda reached at 'Groceryfy': 3 units left",
                     kind=KIND_NORMAL, state=STATE_UNREAD, created_at=now),
    ])

    db.session.add_all([
        ErrorLog(date=now, description="Dummy error 1: Route not found", origin=ORIGIN_BACKEND, code=404),
        ErrorLog(date=now, description="Dummy error 2: Unexpected backend failure", origin=ORIGIN_BACKEND, code=500),
    ])

    db.session.commit()
    current_app.logger.info("Demo data seeded")
    return True
