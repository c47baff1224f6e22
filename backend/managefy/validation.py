from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import BadRequestError


EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

# Maximum money amount: 9,999,999,999.99 fits Numeric(12, 2)
MAX_MONEY = Decimal("9999999999.99")
# Largest value a 64-bit integer column holds
MAX_ID = 2 ** 63 - 1
CENTS = Decimal("0.01")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def normalize_email(value: Any, field: str = "email") -> str:
    """Validate email format and return it lower-cased (emails are case-insensitive unique)."""
    if isinstance(value, str):
        value = value.strip()
    if not is_valid_email(value):
        raise BadRequestError(f"{field} bad formatted: {value!r}")
    return value.lower()


def optional_email(value: Any, field: str = "email") -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return normalize_email(value, field)


def require_text(value: Any, field: str, max_length: int = 255) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError(f"{field} is required")
    value = value.strip()
    if len(value) > max_length:
        raise BadRequestError(f"{field} must be at most {max_length} characters")
    return value


def optional_text(value: Any, field: str, max_length: int = 255) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError(f"{field} must be a string")
    value = value.strip()
    if not value:
        return None
    if len(value) > max_length:
        raise BadRequestError(f"{field} must be at most {max_length} characters")
    return value


def require_int(value: Any, field: str, *, minimum: int | None = None, maximum: int = MAX_ID) -> int:
    """
    Strict integer coercion: rejects bools, decimals and scientific notation.
    """
    if isinstance(value, bool) or value is None:
        raise BadRequestError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or 'e' in stripped.lower() or '.' in stripped:
            raise BadRequestError(f"{field} must be a plain integer")
        try:
            result = int(stripped)
        except ValueError:
            raise BadRequestError(f"{field} must be an integer")
    else:
        raise BadRequestError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise BadRequestError(f"{field} must be >= {minimum}")
    if result > maximum:
        raise BadRequestError(f"{field} must be <= {maximum}")
    return result


def optional_int(value: Any, field: str, *, minimum: int | None = None, maximum: int = MAX_ID) -> int | None:
    if value is None:
        return None
    return require_int(value, field, minimum=minimum, maximum=maximum)


def require_money(value: Any, field: str) -> Decimal:
    """
    Coerce a money amount to a 2-decimal Decimal.

    Floats are refused: JSON bodies are parsed as Decimal and path
    segments arrive as strings, so a float here means a caller bypassed
    the facade.
    """
    if value is None or isinstance(value, (bool, float)):
        raise BadRequestError(f"{field} must be a decimal amount")
    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        raise BadRequestError(f"{field} must be a decimal amount")
    if not amount.is_finite():
        raise BadRequestError(f"{field} must be a finite amount")
    # Range first: quantize overflows the context precision on huge values
    if amount < 0:
        raise BadRequestError(f"{field} must be >= 0")
    if amount > MAX_MONEY:
        raise BadRequestError(f"{field} is too large")
    if amount != amount.quantize(CENTS):
        raise BadRequestError(f"{field} must have at most two decimals")
    return amount.quantize(CENTS)


def optional_money(value: Any, field: str) -> Decimal | None:
    if value is None:
        return None
    return require_money(value, field)


def optional_coefficient(value: Any, field: str) -> Decimal | None:
    """Discount coefficient in (0, 1], up to four decimals."""
    if value is None:
        return None
    if isinstance(value, (bool, float)):
        raise BadRequestError(f"{field} must be a decimal in (0, 1]")
    try:
        coefficient = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        raise BadRequestError(f"{field} must be a decimal in (0, 1]")
    if not coefficient.is_finite() or coefficient <= 0 or coefficient > 1:
        raise BadRequestError(f"{field} must be a decimal in (0, 1]")
    if coefficient != coefficient.quantize(Decimal("0.0001")):
        raise BadRequestError(f"{field} must have at most four decimals")
    return coefficient
