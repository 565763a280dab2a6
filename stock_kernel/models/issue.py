"""
Module: stock_kernel.models.issue
Responsibility: ORM persistence for outward issues and the consumption rows
    recording which batches satisfied them.
Architecture position: Kernel > Models.  May import from db/ and sibling
    models only.

Invariants enforced:
    - Issue and its consumptions are one aggregate: consumptions are only ever
      created through ``IssueModel.consumptions`` in the same flush as the
      issue, and never updated or deleted afterwards.
    - Each consumption amount > 0 (CHECK ck_consumption_amount_positive).
    - (issue_id, batch_id) is unique: one issue draws from a batch at most once.
    - sum(consumption.amount) == issue.quantity; checked by the allocator
      before the aggregate is built.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base
from stock_kernel.db.types import LONG_TEXT_LENGTH, SHORT_TEXT_LENGTH
from stock_kernel.models.batch import BatchModel


class IssueModel(Base):
    """
    Persistent storage for one outward issue.

    Contract:
        Created once with its full list of consumptions; immutable afterwards.
    """

    __tablename__ = "stock_issues"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_issue_quantity_positive"),
        Index("idx_issue_partition", "project_id", "material_id", "issued_at"),
        Index("idx_issue_issued_at", "issued_at"),
    )

    # Scope (NULL = general store)
    project_id: Mapped[int | None] = mapped_column(nullable=True)

    material_id: Mapped[int] = mapped_column(nullable=False)

    quantity: Mapped[Decimal] = mapped_column(nullable=False)

    issued_at: Mapped[datetime] = mapped_column(nullable=False)

    weight: Mapped[Decimal | None] = mapped_column(nullable=True)
    units_count: Mapped[int | None] = mapped_column(nullable=True)

    # Handover metadata
    recipient: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    recipient_designation: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    store_incharge: Mapped[str | None] = mapped_column(String(SHORT_TEXT_LENGTH), nullable=True)
    remarks: Mapped[str | None] = mapped_column(String(LONG_TEXT_LENGTH), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)

    # Relationships
    consumptions: Mapped[list[ConsumptionModel]] = relationship(
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="ConsumptionModel.sequence",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<Issue {self.id}: project={self.project_id} material={self.material_id} "
            f"qty={self.quantity}>"
        )


class ConsumptionModel(Base):
    """
    Amount drawn from one batch by one issue.

    ``sequence`` is the position in the FIFO walk (0-based) so the batch
    summary can be rebuilt in allocation order.
    """

    __tablename__ = "stock_consumptions"

    __table_args__ = (
        UniqueConstraint("issue_id", "batch_id", name="uq_consumption_issue_batch"),
        CheckConstraint("amount > 0", name="ck_consumption_amount_positive"),
        Index("idx_consumption_batch", "batch_id"),
    )

    issue_id: Mapped[int] = mapped_column(
        ForeignKey("stock_issues.id"),
        nullable=False,
    )

    batch_id: Mapped[int] = mapped_column(
        ForeignKey("stock_batches.id"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    sequence: Mapped[int] = mapped_column(nullable=False)

    # Relationships
    issue: Mapped[IssueModel] = relationship(
        back_populates="consumptions",
    )

    batch: Mapped[BatchModel] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<Consumption issue={self.issue_id} batch={self.batch_id} amount={self.amount}>"
