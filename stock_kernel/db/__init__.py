"""Database layer - engine, base class, and column types."""

from stock_kernel.db.base import Base
from stock_kernel.db.engine import (
    build_engine,
    build_session_factory,
    create_tables,
    drop_tables,
    session_scope,
)
from stock_kernel.db.types import (
    QUANTITY_PLACES,
    FixedDecimal,
    UTCDateTime,
    round_quantity,
)

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "FixedDecimal",
    "UTCDateTime",
    "QUANTITY_PLACES",
    "round_quantity",
]
