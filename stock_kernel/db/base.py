"""
Module: stock_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models.  Provides
    the integer identity convention and the type annotation map that gives every
    quantity and timestamp column the same storage type.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Integer identities: batches and issues get monotonically assigned integer
      ids.  FIFO ties on equal receipt time are broken by id, and the synthetic
      "Batch-<id>" label is built from it.
    - Decimal precision: type_annotation_map maps Python Decimal to FixedDecimal
      (three fractional digits, exact on every backend).  NEVER use float for
      quantities or weights.
    - Timestamps: datetime maps to UTCDateTime, always timezone-aware.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from stock_kernel.db.types import FixedDecimal, UTCDateTime

# SQLite only auto-increments INTEGER PRIMARY KEY columns.
IdentityInteger = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in the ledger inherits from Base.  Base provides an
        integer primary key and a type_annotation_map that enforces consistent
        column types across the schema.

    Guarantees:
        - id is a database-assigned integer (BIGINT, INTEGER on SQLite).
        - Decimal maps to FixedDecimal -- three fractional digits, exact.
        - datetime maps to UTCDateTime -- always timezone-aware UTC.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: FixedDecimal(),
        datetime: UTCDateTime(),
        int: IdentityInteger,
    }

    id: Mapped[int] = mapped_column(
        IdentityInteger,
        primary_key=True,
        autoincrement=True,
    )
