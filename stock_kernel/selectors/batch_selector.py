"""
BatchSelector -- read access to the batch store.

Responsibility:
    Loads batches for a (scope, material) partition in FIFO order, either as
    immutable snapshots for reporting or as locked ORM rows for allocation.

Architecture position:
    Kernel > Selectors.

Invariants enforced:
    - FIFO order is received_at ASC, then id ASC.  Every caller that needs
      allocation order goes through ``_fifo_query`` so the order cannot drift.
    - ``lock_eligible`` issues SELECT ... FOR UPDATE.  PostgreSQL holds the row
      locks until commit; SQLite ignores the clause and relies on the
      in-process partition lock.
"""

from __future__ import annotations

from sqlalchemy import Select, select

from stock_kernel.domain.movements import BatchSnapshot, ReceiptDetails
from stock_kernel.domain.scope import Partition, Scope, scope_for_project
from stock_kernel.models.batch import BatchModel
from stock_kernel.selectors.base import BaseSelector, scope_clause


def batch_to_snapshot(batch: BatchModel) -> BatchSnapshot:
    """Freeze an ORM batch into a BatchSnapshot."""
    return BatchSnapshot(
        batch_id=batch.id,
        scope=scope_for_project(batch.project_id),
        material_id=batch.material_id,
        quantity=batch.quantity,
        remaining=batch.remaining,
        received_at=batch.received_at,
        details=ReceiptDetails(
            batch_label=batch.batch_label,
            supplier=batch.supplier,
            invoice_number=batch.invoice_number,
            invoice_date=batch.invoice_date,
            invoice_quantity=batch.invoice_quantity,
            vehicle_number=batch.vehicle_number,
            weight=batch.weight,
            units_count=batch.units_count,
            remarks=batch.remarks,
        ),
    )


class BatchSelector(BaseSelector[BatchModel]):
    """Queries over stock_batches."""

    def _fifo_query(self, partition: Partition, only_available: bool) -> Select:
        stmt = select(BatchModel).where(
            scope_clause(BatchModel.project_id, partition.scope),
            BatchModel.material_id == partition.material_id,
        )
        if only_available:
            stmt = stmt.where(BatchModel.remaining > 0)
        return stmt.order_by(BatchModel.received_at.asc(), BatchModel.id.asc())

    def lock_eligible(self, partition: Partition) -> list[BatchModel]:
        """
        Batches with remaining > 0 in FIFO order, locked FOR UPDATE.

        Returns ORM rows; only StockWriter may mutate them.
        """
        stmt = self._fifo_query(partition, only_available=True).with_for_update()
        return list(self.session.scalars(stmt).all())

    def available(self, partition: Partition) -> list[BatchSnapshot]:
        """Batches with stock left, FIFO order."""
        rows = self.session.scalars(self._fifo_query(partition, only_available=True)).all()
        return [batch_to_snapshot(row) for row in rows]

    def for_partition(self, partition: Partition) -> list[BatchSnapshot]:
        """Every batch ever received for the partition, FIFO order."""
        rows = self.session.scalars(self._fifo_query(partition, only_available=False)).all()
        return [batch_to_snapshot(row) for row in rows]

    def for_scope(self, scope: Scope | None = None) -> list[BatchSnapshot]:
        """All batches in a scope (every scope when None), FIFO order per material."""
        stmt = select(BatchModel)
        if scope is not None:
            stmt = stmt.where(scope_clause(BatchModel.project_id, scope))
        stmt = stmt.order_by(
            BatchModel.material_id.asc(),
            BatchModel.received_at.asc(),
            BatchModel.id.asc(),
        )
        return [batch_to_snapshot(row) for row in self.session.scalars(stmt).all()]
