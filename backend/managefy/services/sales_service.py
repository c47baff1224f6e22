"""
Sales Service - sale aggregate with lines, pricing and payment state

The sale is the only aggregate root: lines are created and replaced
through it, and total_price is always recomputed from them. Every
mutation locks the sale row first (SELECT ... FOR UPDATE) and notifies
the caller inside the same transaction.

State machine:
    PendingPayment -> PartialPayment -> Payed -> PayedAndBilled
    PendingPayment -> Payed
    PendingPayment | PartialPayment | Payed -> Cancelled
Cancelled and PayedAndBilled are terminal. PartialPayment never goes back
to PendingPayment.
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..errors import BadRequestError
from ..extensions import db
from ..models import Client, Product, Sale, SaleLine, User
from ..time_utils import parse_iso_datetime, utcnow
from ..validation import MAX_MONEY, optional_coefficient, optional_money, require_int, require_money
from .catalog_common import get_live, require_business_id
from .concurrency import lock_for_update, transactional
from . import notification_service, permission_service


STATE_CANCELLED = "Cancelled"
STATE_PENDING_PAYMENT = "PendingPayment"
STATE_PARTIAL_PAYMENT = "PartialPayment"
STATE_PAYED = "Payed"
STATE_PAYED_AND_BILLED = "PayedAndBilled"
VALID_STATES = (
    STATE_CANCELLED,
    STATE_PENDING_PAYMENT,
    STATE_PARTIAL_PAYMENT,
    STATE_PAYED,
    STATE_PAYED_AND_BILLED,
)

ALLOWED_TRANSITIONS = {
    STATE_PENDING_PAYMENT: {STATE_PARTIAL_PAYMENT, STATE_PAYED, STATE_CANCELLED},
    STATE_PARTIAL_PAYMENT: {STATE_PAYED, STATE_CANCELLED},
    STATE_PAYED: {STATE_PAYED_AND_BILLED, STATE_CANCELLED},
    STATE_CANCELLED: set(),
    STATE_PAYED_AND_BILLED: set(),
}
TERMINAL_STATES = {STATE_CANCELLED, STATE_PAYED_AND_BILLED}

# Lines and payments can only change while the sale is still being paid
EDITABLE_STATES = {STATE_PENDING_PAYMENT, STATE_PARTIAL_PAYMENT}

MAX_LINE_QUANTITY = 1_000_000


def parse_state(text: str | None) -> str:
    """Match a state name case-insensitively."""
    if isinstance(text, str):
        for state in VALID_STATES:
            if state.lower() == text.strip().lower():
                return state
    raise BadRequestError(f"Invalid sale state: {text}")


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


def _validate_client(client_id, business_id: int) -> int | None:
    if client_id is None:
        return None
    client_id = require_int(client_id, "clientId", minimum=1)
    client = get_live(Client, client_id, "Client")
    if client.business_id != business_id:
        raise BadRequestError(f"Client with ID: {client_id} belongs to another business")
    return client_id


def _build_lines(raw_lines, business_id: int) -> list[SaleLine]:
    """
    Turn request lines into SaleLine rows numbered 1..n.

    unitPrice defaults to the product's current price; unitCost is always
    taken from the product. Subtotals and the total must fit a money column.
    """
    if not isinstance(raw_lines, list) or not raw_lines:
        raise BadRequestError("A sale needs at least one line")

    lines = []
    for line_no, raw in enumerate(raw_lines, start=1):
        if not isinstance(raw, dict):
            raise BadRequestError(f"lines[{line_no}] must be an object")
        field = f"lines[{line_no}]"

        product_id = require_int(raw.get("productId"), f"{field}.productId", minimum=1)
        product = get_live(Product, product_id, "Product")
        if product.business_id != business_id:
            raise BadRequestError(f"Product with ID: {product_id} belongs to another business")

        quantity = raw.get("quantity", raw.get("qty"))
        quantity = require_int(quantity, f"{field}.quantity", minimum=1, maximum=MAX_LINE_QUANTITY)

        unit_price = raw.get("unitPrice")
        unit_price = product.unit_price if unit_price is None else require_money(unit_price, f"{field}.unitPrice")

        discount = raw.get("discountCoefficient", raw.get("discount"))
        discount = optional_coefficient(discount, f"{field}.discountCoefficient")

        line = SaleLine(
            line_no=line_no,
            product_id=product.id,
            quantity=quantity,
            unit_price=unit_price,
            unit_cost=product.unit_cost,
            discount_coefficient=discount,
        )
        if line.subtotal > MAX_MONEY:
            raise BadRequestError(f"{field} subtotal is too large")
        lines.append(line)

    if sum((line.subtotal for line in lines), Decimal("0.00")) > MAX_MONEY:
        raise BadRequestError("Sale total is too large")
    return lines


def _state_for_payment(amount: Decimal | None, total: Decimal) -> str:
    if amount is None or amount == 0:
        return STATE_PENDING_PAYMENT
    if amount == total:
        return STATE_PAYED
    return STATE_PARTIAL_PAYMENT


def _check_payment_range(amount: Decimal | None, total: Decimal) -> None:
    if amount is not None and amount > total:
        raise BadRequestError(f"partialPayment {amount} exceeds the sale total {total}")


def _lock_sale(caller: User, sale_id: int) -> Sale:
    sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
    if not sale:
        raise BadRequestError(f"Sale with ID: {sale_id} doesn't exist")
    permission_service.resolve_role(caller, sale.business_id)
    return sale


def _notify(caller: User, message: str) -> None:
    notification_service.create_notification(caller.id, message, notification_service.KIND_NORMAL)


def get_sales(caller: User, business_id: int) -> list[Sale]:
    permission_service.require_reader(caller, business_id)
    return (
        db.session.query(Sale)
        .filter_by(business_id=business_id)
        .order_by(Sale.date.desc(), Sale.id.desc())
        .all()
    )


def get_sales_by_interval(caller: User, business_id: int, date_from: str, date_to: str) -> list[Sale]:
    permission_service.require_reader(caller, business_id)
    try:
        start = parse_iso_datetime(date_from)
        end = parse_iso_datetime(date_to)
    except ValueError:
        raise BadRequestError("from and to must be ISO-8601 datetimes")
    if start is None or end is None:
        raise BadRequestError("from and to are required")
    if start > end:
        raise BadRequestError("from must be earlier than or equal to to")

    return (
        db.session.query(Sale)
        .filter(Sale.business_id == business_id, Sale.date >= start, Sale.date <= end)
        .order_by(Sale.date, Sale.id)
        .all()
    )


def get_sale(caller: User, sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise BadRequestError(f"Sale with ID: {sale_id} doesn't exist")
    permission_service.require_reader(caller, sale.business_id)
    return sale


@transactional
def create_sale(caller: User, data: dict) -> Sale:
    """
    Create a sale with its lines.

    Any client-supplied totalPrice is ignored. The initial state is
    PartialPayment when a positive partialPayment is supplied, otherwise
    PendingPayment.
    """
    business_id = require_business_id(data)
    permission_service.resolve_role(caller, business_id)

    client_id = _validate_client(data.get("clientId"), business_id)
    lines = _build_lines(data.get("lines"), business_id)

    sale = Sale(
        date=utcnow(),
        business_id=business_id,
        client_id=client_id,
        state=STATE_PENDING_PAYMENT,
    )
    sale.lines = lines
    total = sale.recalculate_total()

    partial = optional_money(data.get("partialPayment"), "partialPayment")
    _check_payment_range(partial, total)
    sale.partial_payment = partial
    if partial is not None and partial > 0:
        sale.state = STATE_PARTIAL_PAYMENT

    db.session.add(sale)
    db.session.flush()

    _notify(caller, f"The sale #{sale.id} for ${total} was created successfully")
    current_app.logger.info("Sale %s created in business %s", sale.id, business_id)
    return sale


@transactional
def update_sale(caller: User, sale_id: int, data: dict) -> Sale:
    """Rewrite client, lines and/or partial payment of a sale still being paid."""
    sale = _lock_sale(caller, sale_id)
    if sale.state not in EDITABLE_STATES:
        raise BadRequestError(f"A sale in state {sale.state} can't be modified")

    if "clientId" in data:
        sale.client_id = _validate_client(data.get("clientId"), sale.business_id)

    if "lines" in data:
        new_lines = _build_lines(data.get("lines"), sale.business_id)
        # Orphans are deleted before the new rows reuse their line numbers
        sale.lines.clear()
        db.session.flush()
        sale.lines.extend(new_lines)

    total = sale.recalculate_total()

    if "partialPayment" in data:
        partial = optional_money(data.get("partialPayment"), "partialPayment")
    else:
        partial = sale.partial_payment
    _check_payment_range(partial, total)

    new_state = _state_for_payment(partial, total)
    if new_state != sale.state and not can_transition(sale.state, new_state):
        raise BadRequestError(f"Invalid sale state transition: {sale.state} -> {new_state}")

    sale.partial_payment = partial
    sale.state = new_state
    db.session.flush()

    _notify(caller, f"The sale #{sale.id} was updated successfully")
    return sale


@transactional
def update_sale_state(caller: User, sale_id: int, state_text: str) -> Sale:
    new_state = parse_state(state_text)
    sale = _lock_sale(caller, sale_id)

    if sale.state == STATE_PAYED_AND_BILLED:
        raise BadRequestError("A sale in state PayedAndBilled is immutable")
    if not can_transition(sale.state, new_state):
        raise BadRequestError(f"Invalid sale state transition: {sale.state} -> {new_state}")

    if new_state == STATE_PAYED:
        sale.partial_payment = sale.total_price
    elif new_state == STATE_PARTIAL_PAYMENT:
        partial = sale.partial_payment
        if partial is None or not (0 < partial < sale.total_price):
            raise BadRequestError("Register a partial payment before moving to PartialPayment")

    sale.state = new_state
    db.session.flush()

    _notify(caller, f"The sale #{sale.id} is now in state '{new_state}'")
    return sale


@transactional
def update_sale_partial_payment(caller: User, sale_id: int, amount) -> Sale:
    """
    Register the amount paid so far.

    amount == total moves the sale to Payed, 0 < amount < total to
    PartialPayment; zero is refused.
    """
    amount = require_money(amount, "partialPayment")
    sale = _lock_sale(caller, sale_id)

    if sale.state not in EDITABLE_STATES:
        raise BadRequestError(f"Can't register a payment for a sale in state {sale.state}")
    if amount == 0:
        raise BadRequestError("partialPayment must be greater than zero")
    _check_payment_range(amount, sale.total_price)

    sale.partial_payment = amount
    sale.state = _state_for_payment(amount, sale.total_price)
    db.session.flush()

    _notify(caller, f"A payment of ${amount} was registered for the sale #{sale.id}")
    return sale


@transactional
def cancel_sale(caller: User, sale_id: int) -> Sale:
    sale = _lock_sale(caller, sale_id)

    if sale.state in TERMINAL_STATES:
        raise BadRequestError(f"A sale in state {sale.state} can't be cancelled")
    if not can_transition(sale.state, STATE_CANCELLED):
        raise BadRequestError(f"Invalid sale state transition: {sale.state} -> {STATE_CANCELLED}")

    sale.state = STATE_CANCELLED
    db.session.flush()

    _notify(caller, f"The sale #{sale.id} was cancelled")
    current_app.logger.info("Sale %s cancelled", sale.id)
    return sale
