"""
Allocation value objects.

Produced by the FIFO engine (``stock_engines.allocation.fifo``) and applied
by ``StockWriter``.  ``Allocation.verify()`` is the conservation check both
sides run: the engine before returning, the writer before mutating rows.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from stock_kernel.domain.movements import ConsumptionLine
from stock_kernel.exceptions import InternalConsistencyError

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class BatchBalance:
    """One open batch as seen by the allocator."""

    batch_id: int
    received_at: datetime
    remaining: Decimal
    batch_label: str | None = None


@dataclass(frozen=True, slots=True)
class AllocationLine:
    """Amount drawn from one batch, and the batch balance it was drawn from."""

    batch_id: int
    amount: Decimal
    remaining_before: Decimal
    batch_label: str | None = None

    @property
    def remaining_after(self) -> Decimal:
        return self.remaining_before - self.amount

    @property
    def exhausts_batch(self) -> bool:
        return self.remaining_after == _ZERO

    def as_consumption(self) -> ConsumptionLine:
        return ConsumptionLine(
            batch_id=self.batch_id,
            amount=self.amount,
            batch_label=self.batch_label,
        )


@dataclass(frozen=True, slots=True)
class Allocation:
    """
    Result of one FIFO walk over a (scope, material) partition.

    Guarantees (after ``verify()``):
        - ``lines`` are in allocation order.
        - ``sum(lines.amount) == requested``.
        - Every line draws > 0 and no more than its batch held.
        - No batch appears twice.
    """

    scope_key: str
    material_id: int
    requested: Decimal
    available: Decimal
    lines: tuple[AllocationLine, ...]

    @property
    def allocated(self) -> Decimal:
        return sum((line.amount for line in self.lines), _ZERO)

    @property
    def residual(self) -> Decimal:
        return self.requested - self.allocated

    @property
    def consumptions(self) -> tuple[ConsumptionLine, ...]:
        return tuple(line.as_consumption() for line in self.lines)

    def verify(self) -> None:
        """
        Raises:
            InternalConsistencyError: any guarantee above does not hold.
        """
        residual = self.residual
        if residual != _ZERO:
            raise InternalConsistencyError(
                self.scope_key, self.material_id, residual,
                "allocated amounts do not add up to the requested quantity",
            )
        seen: set[int] = set()
        for line in self.lines:
            if line.amount <= _ZERO or line.amount > line.remaining_before:
                raise InternalConsistencyError(
                    self.scope_key, self.material_id, residual,
                    f"batch {line.batch_id} drawn {line.amount} of {line.remaining_before}",
                )
            if line.batch_id in seen:
                raise InternalConsistencyError(
                    self.scope_key, self.material_id, residual,
                    f"batch {line.batch_id} drawn twice",
                )
            seen.add(line.batch_id)
