"""
Module: stock_kernel.db.types
Responsibility: Column types and rounding helpers for stock quantities and
    movement timestamps.  Centralizes precision and rounding so that every
    model, engine, and service handles quantities identically.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Quantities carry exactly QUANTITY_PLACES (3) fractional digits.
      round_quantity() is the ONLY sanctioned rounding function and always
      rounds half-up.
    - No floats in stored balances.  On PostgreSQL quantities are NUMERIC(19, 3);
      on other backends (SQLite) they are stored as exact integer thousandths
      so that repeated small consumptions never drift.
    - Timestamps are stored in UTC and always read back timezone-aware.

Failure modes:
    - decimal.InvalidOperation if a non-numeric value reaches FixedDecimal.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import BigInteger, DateTime, Numeric
from sqlalchemy.types import TypeDecorator

QUANTITY_PLACES = 3
QUANTITY_PRECISION = 19
DEFAULT_ROUNDING = ROUND_HALF_UP

_QUANTUM = Decimal(1).scaleb(-QUANTITY_PLACES)


def round_quantity(value: Decimal, places: int = QUANTITY_PLACES) -> Decimal:
    """
    Round a quantity to the ledger's fixed-point precision.

    This is the ONLY sanctioned rounding function for quantities, weights,
    and balances.

    Args:
        value: The Decimal value to round.
        places: Fractional digits to keep (default 3).

    Returns:
        Decimal quantized half-up to ``places`` digits.
    """
    quantum = _QUANTUM if places == QUANTITY_PLACES else Decimal(1).scaleb(-places)
    return value.quantize(quantum, rounding=DEFAULT_ROUNDING)


class FixedDecimal(TypeDecorator):
    """
    Exact fixed-point decimal column.

    Contract:
        Accepts Decimal (or int) on the way in, returns Decimal with exactly
        ``places`` fractional digits on the way out.

    Guarantees:
        - PostgreSQL: NUMERIC(precision, places), passed through as Decimal.
        - Other dialects: BIGINT holding value * 10**places.  Integer storage
          keeps comparisons (``remaining > 0``) and ordering correct in SQL.
    """

    impl = Numeric
    cache_ok = True

    def __init__(self, places: int = QUANTITY_PLACES, precision: int = QUANTITY_PRECISION):
        super().__init__()
        self.places = places
        self.precision = precision

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(self.precision, self.places, asdecimal=True))
        return dialect.type_descriptor(BigInteger())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        quantized = round_quantity(Decimal(value), self.places)
        if dialect.name == "postgresql":
            return quantized
        return int(quantized.scaleb(self.places))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return round_quantity(Decimal(value), self.places)
        return round_quantity(Decimal(int(value)).scaleb(-self.places), self.places)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp stored in UTC.

    SQLite has no timezone support; values are stored as naive UTC there and
    re-tagged with UTC when loaded, so callers always see aware datetimes.
    Naive inputs are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        value = value.astimezone(UTC)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


# Column lengths shared by the batch and issue tables
SHORT_TEXT_LENGTH = 128
LONG_TEXT_LENGTH = 512
