"""
Module: stock_kernel.models.batch
Responsibility: ORM persistence for stock batches.  Each batch is one inward
    receipt with its own remaining balance, consumed oldest-first by issues.
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - quantity > 0 (CHECK ck_batch_quantity_positive).
    - 0 <= remaining <= quantity (CHECK ck_batch_remaining_bounds).
    - remaining only ever decreases, and only inside an issue allocation
      (StockWriter.apply_allocation is the sole writer).
    - (project_id, material_id, received_at, id) index gives the FIFO walk its
      order without a sort.

Failure modes:
    - IntegrityError if a write would push remaining below zero or above the
      received quantity.

Audit relevance:
    Batches are never deleted.  Together with the consumption rows of each
    issue they reconstruct exactly how every unit of stock left the store.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base
from stock_kernel.db.types import LONG_TEXT_LENGTH, SHORT_TEXT_LENGTH


class BatchModel(Base):
    """
    Persistent storage for one inward receipt.

    Contract:
        ``project_id`` NULL means the general store.  Callers never test it
        directly; selectors translate Scope values through ``scope_clause``.

    Guarantees:
        - remaining == quantity at creation.
        - Descriptive columns (supplier, invoice, vehicle, remarks) are never
          read by the allocator.

    Non-goals:
        - No foreign key to projects or materials; those tables belong to
          the surrounding application.
    """

    __tablename__ = "stock_batches"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_batch_quantity_positive"),
        CheckConstraint(
            "remaining >= 0 AND remaining <= quantity",
            name="ck_batch_remaining_bounds",
        ),
        # Query: FIFO walk for one partition
        Index("idx_batch_partition_fifo", "project_id", "material_id", "received_at", "id"),
        # Query: history across all scopes
        Index("idx_batch_received_at", "received_at"),
    )

    # Scope (NULL = general store)
    project_id: Mapped[int | None] = mapped_column(nullable=True)

    material_id: Mapped[int] = mapped_column(nullable=False)

    quantity: Mapped[Decimal] = mapped_column(nullable=False)

    remaining: Mapped[Decimal] = mapped_column(nullable=False)

    # FIFO ordering key
    received_at: Mapped[datetime] = mapped_column(nullable=False)

    batch_label: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)

    # Optional dimensions for weight / unit statistics
    weight: Mapped[Decimal | None] = mapped_column(nullable=True)
    units_count: Mapped[int | None] = mapped_column(nullable=True)

    # Reporting-only metadata
    supplier: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    invoice_number: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    invoice_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    invoice_quantity: Mapped[Decimal | None] = mapped_column(nullable=True)
    vehicle_number: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    remarks: Mapped[str | None] = mapped_column(String(LONG_TEXT_LENGTH), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Batch {self.id}: project={self.project_id} material={self.material_id} "
            f"{self.remaining}/{self.quantity}>"
        )
