"""
Quantity normalization at the ledger boundary.

Every amount that enters the ledger passes through one of these functions
before it reaches the allocator or the database.  They convert caller input
(Decimal, int, str, float) to a Decimal with exactly three fractional digits,
rounded half-up, and reject anything that is not a usable amount.

Floats are converted through ``str()`` so that ``0.1`` becomes
``Decimal("0.1")`` rather than its binary expansion.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from stock_kernel.db.types import QUANTITY_PLACES, round_quantity
from stock_kernel.exceptions import InvalidQuantityError

_ZERO = Decimal("0")
# Largest amount that fits the stored column on every backend.
MAX_QUANTITY = Decimal(10) ** 15


def _to_decimal(value: Any, field: str) -> Decimal:
    if value is None:
        raise InvalidQuantityError(value, field, "is required")
    if isinstance(value, bool):
        raise InvalidQuantityError(value, field, "must be a number, not a boolean")
    if isinstance(value, Decimal):
        candidate = value
    elif isinstance(value, (int, float, str)):
        try:
            candidate = Decimal(str(value).strip()) if isinstance(value, (float, str)) else Decimal(value)
        except InvalidOperation:
            raise InvalidQuantityError(value, field, "is not a number") from None
    else:
        raise InvalidQuantityError(value, field, f"unsupported type {type(value).__name__}")

    if candidate.is_nan():
        raise InvalidQuantityError(value, field, "must not be NaN")
    if candidate.is_infinite():
        raise InvalidQuantityError(value, field, "must be finite")
    return candidate


def _bounded(value: Any, field: str) -> Decimal:
    candidate = _to_decimal(value, field)
    if abs(candidate) >= MAX_QUANTITY:
        raise InvalidQuantityError(value, field, f"must be below {MAX_QUANTITY}")
    return round_quantity(candidate)


def normalize_quantity(value: Any, field: str = "quantity") -> Decimal:
    """
    Normalize a movement quantity.

    Returns:
        Decimal rounded half-up to three places, strictly positive.

    Raises:
        InvalidQuantityError: None, boolean, non-numeric, NaN, infinite,
            or not greater than zero once rounded (``0.0004`` rounds to zero).
    """
    rounded = _bounded(value, field)
    if rounded <= _ZERO:
        raise InvalidQuantityError(value, field, "must be greater than zero")
    return rounded


def normalize_weight(value: Any, field: str = "weight") -> Decimal | None:
    """Optional weight: None stays None, otherwise a non-negative 3dp Decimal."""
    if value is None:
        return None
    rounded = _bounded(value, field)
    if rounded < _ZERO:
        raise InvalidQuantityError(value, field, "must not be negative")
    return rounded


def normalize_units(value: Any, field: str = "units_count") -> int | None:
    """Optional unit count: None stays None, otherwise a non-negative int."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError(value, field, "must be a whole number")
    if value < 0:
        raise InvalidQuantityError(value, field, "must not be negative")
    return value


def format_quantity(value: Decimal) -> str:
    """Render a quantity with exactly three fractional digits, e.g. ``100.000``."""
    return f"{round_quantity(value):.{QUANTITY_PLACES}f}"
