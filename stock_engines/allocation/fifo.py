"""
Module: stock_engines.allocation.fifo
Responsibility:
    Allocate an outward issue against the open batches of one
    (scope, material) partition, oldest batch first.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The caller supplies the
    batch balances it read under lock and applies the result itself
    (StockWriter.apply_allocation).

Invariants enforced:
    - Availability is checked before the walk: if the summed balance is below
      the request, InsufficientStockError is raised and no line is produced.
    - Order: received_at ASC, then batch_id ASC.  The input is re-sorted, so a
      caller cannot accidentally allocate out of order.
    - Conservation: the returned Allocation has passed ``verify()``.

Failure modes:
    - InvalidQuantityError if requested <= 0.
    - InsufficientStockError(available=...) when stock is short.
    - InternalConsistencyError if the walk leaves a residual.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from stock_engines.tracer import traced_engine
from stock_kernel.domain.allocation import Allocation, AllocationLine, BatchBalance
from stock_kernel.exceptions import (
    InsufficientStockError,
    InternalConsistencyError,
    InvalidQuantityError,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.fifo")

_ZERO = Decimal("0")


def fifo_order(batches: Sequence[BatchBalance]) -> list[BatchBalance]:
    """Open batches, oldest first; equal receipt times by batch id."""
    return sorted(
        (b for b in batches if b.remaining > _ZERO),
        key=lambda b: (b.received_at, b.batch_id),
    )


@traced_engine("fifo_allocation", "1.0", fingerprint_fields=("scope_key", "material_id", "requested"))
def allocate_fifo(
    *,
    scope_key: str,
    material_id: int,
    batches: Sequence[BatchBalance],
    requested: Decimal,
) -> Allocation:
    """
    Allocate ``requested`` across ``batches`` oldest first.

    Args:
        scope_key: Partition scope, used in errors and logs.
        material_id: Partition material.
        batches: Open batches of the partition; batches with no balance are
            skipped.
        requested: Normalized, positive quantity.

    Returns:
        Allocation whose lines consume ``min(remaining, still_needed)``
        from each batch in FIFO order.
    """
    if requested <= _ZERO:
        raise InvalidQuantityError(requested, "quantity", "must be greater than zero")

    ordered = fifo_order(batches)
    available = sum((b.remaining for b in ordered), _ZERO)

    if available < requested:
        raise InsufficientStockError(scope_key, material_id, requested, available)

    lines: list[AllocationLine] = []
    still_needed = requested
    for batch in ordered:
        if still_needed == _ZERO:
            break
        take = min(batch.remaining, still_needed)
        lines.append(
            AllocationLine(
                batch_id=batch.batch_id,
                amount=take,
                remaining_before=batch.remaining,
                batch_label=batch.batch_label,
            )
        )
        still_needed -= take

    if still_needed != _ZERO:
        logger.error(
            "fifo_allocation_residual",
            extra={
                "scope": scope_key,
                "material_id": material_id,
                "requested": str(requested),
                "residual": str(still_needed),
            },
        )
        raise InternalConsistencyError(scope_key, material_id, still_needed)

    allocation = Allocation(
        scope_key=scope_key,
        material_id=material_id,
        requested=requested,
        available=available,
        lines=tuple(lines),
    )
    allocation.verify()
    return allocation
