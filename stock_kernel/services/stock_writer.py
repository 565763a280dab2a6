"""
StockWriter -- the only code path that writes batches, issues and consumptions.

Responsibility:
    Persists receipts as new batches and applies a computed FIFO allocation:
    decrements the touched batches and creates the issue together with its
    consumption rows.

Architecture position:
    Kernel > Services -- imperative shell.  Flushes, never commits.

Invariants enforced:
    - A new batch starts with remaining == quantity.
    - apply_allocation() re-verifies the allocation against the locked rows
      before mutating anything: each line must match a locked batch whose
      balance is unchanged since the allocator saw it.
    - The issue and all its consumptions are added in one flush.

Failure modes:
    - InternalConsistencyError when the allocation does not match the locked
      rows.  The caller's transaction is rolled back by session_scope.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from stock_kernel.domain.allocation import Allocation
from stock_kernel.domain.movements import IssueDetails, ReceiptDetails
from stock_kernel.domain.scope import Partition, project_id_of
from stock_kernel.exceptions import InternalConsistencyError
from stock_kernel.logging_config import get_logger
from stock_kernel.models.batch import BatchModel
from stock_kernel.models.issue import ConsumptionModel, IssueModel
from stock_kernel.services.base import BaseService

logger = get_logger("services.stock_writer")


class StockWriter(BaseService[BatchModel]):
    """Flush-only writer for the batch and movement stores."""

    def add_batch(
        self,
        partition: Partition,
        quantity: Decimal,
        received_at: datetime,
        details: ReceiptDetails,
        created_at: datetime,
    ) -> BatchModel:
        batch = BatchModel(
            project_id=project_id_of(partition.scope),
            material_id=partition.material_id,
            quantity=quantity,
            remaining=quantity,
            received_at=received_at,
            batch_label=details.batch_label,
            weight=details.weight,
            units_count=details.units_count,
            supplier=details.supplier,
            invoice_number=details.invoice_number,
            invoice_date=details.invoice_date,
            invoice_quantity=details.invoice_quantity,
            vehicle_number=details.vehicle_number,
            remarks=details.remarks,
            created_at=created_at,
        )
        self.session.add(batch)
        self.session.flush()
        return batch

    def apply_allocation(
        self,
        partition: Partition,
        allocation: Allocation,
        locked_batches: Sequence[BatchModel],
        issued_at: datetime,
        details: IssueDetails,
        created_at: datetime,
    ) -> IssueModel:
        """
        Decrement the allocated batches and persist the issue aggregate.

        ``locked_batches`` are the rows BatchSelector.lock_eligible returned
        for this partition in the same transaction.
        """
        allocation.verify()
        by_id = {batch.id: batch for batch in locked_batches}
        scope_key = partition.scope.key

        for line in allocation.lines:
            batch = by_id.get(line.batch_id)
            if batch is None:
                raise InternalConsistencyError(
                    scope_key, partition.material_id, allocation.requested,
                    f"batch {line.batch_id} is not locked in this partition",
                )
            if batch.remaining != line.remaining_before:
                raise InternalConsistencyError(
                    scope_key, partition.material_id, allocation.requested,
                    f"batch {line.batch_id} balance moved from "
                    f"{line.remaining_before} to {batch.remaining}",
                )

        issue = IssueModel(
            project_id=project_id_of(partition.scope),
            material_id=partition.material_id,
            quantity=allocation.requested,
            issued_at=issued_at,
            weight=details.weight,
            units_count=details.units_count,
            recipient=details.recipient,
            recipient_designation=details.recipient_designation,
            store_incharge=details.store_incharge,
            remarks=details.remarks,
            created_at=created_at,
        )
        for sequence, line in enumerate(allocation.lines):
            batch = by_id[line.batch_id]
            batch.remaining = line.remaining_after
            issue.consumptions.append(
                ConsumptionModel(
                    batch=batch,
                    amount=line.amount,
                    sequence=sequence,
                )
            )

        self.session.add(issue)
        self.session.flush()

        logger.debug(
            "allocation_applied",
            extra={
                "partition": partition.key,
                "issue_id": issue.id,
                "batches_touched": len(allocation.lines),
                "batches_exhausted": sum(1 for line in allocation.lines if line.exhausts_batch),
            },
        )
        return issue
