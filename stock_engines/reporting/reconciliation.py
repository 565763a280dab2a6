"""
Module: stock_engines.reporting.reconciliation
Responsibility:
    Check one (scope, material) partition against the ledger's conservation
    rules and report every violation found.

Architecture position:
    Engines -- pure, zero I/O.

Checks:
    - received - issued == sum(batch.remaining)
    - 0 <= batch.remaining <= batch.quantity for every batch
    - sum(consumption.amount) == issue.quantity for every issue
    - per batch, quantity - remaining == amounts drawn from it by issues
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from stock_kernel.domain.movements import BatchSnapshot, IssueSnapshot
from stock_kernel.domain.scope import Scope

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    scope: Scope
    material_id: int
    total_in: Decimal
    total_out: Decimal
    remaining_total: Decimal
    batch_count: int
    issue_count: int
    discrepancies: tuple[str, ...]

    @property
    def is_consistent(self) -> bool:
        return not self.discrepancies

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope.key,
            "material_id": self.material_id,
            "total_in": str(self.total_in),
            "total_out": str(self.total_out),
            "remaining_total": str(self.remaining_total),
            "batch_count": self.batch_count,
            "issue_count": self.issue_count,
            "is_consistent": self.is_consistent,
            "discrepancies": list(self.discrepancies),
        }


def reconcile_partition(
    scope: Scope,
    material_id: int,
    batches: Iterable[BatchSnapshot],
    issues: Iterable[IssueSnapshot],
) -> ReconciliationResult:
    batches = [b for b in batches if b.scope == scope and b.material_id == material_id]
    issues = [i for i in issues if i.scope == scope and i.material_id == material_id]
    problems: list[str] = []

    total_in = sum((b.quantity for b in batches), _ZERO)
    total_out = sum((i.quantity for i in issues), _ZERO)
    remaining_total = sum((b.remaining for b in batches), _ZERO)

    if total_in - total_out != remaining_total:
        problems.append(
            f"received {total_in} - issued {total_out} != remaining {remaining_total}"
        )

    for batch in batches:
        if not (_ZERO <= batch.remaining <= batch.quantity):
            problems.append(
                f"batch {batch.batch_id} remaining {batch.remaining} outside 0..{batch.quantity}"
            )

    drawn: dict[int, Decimal] = defaultdict(lambda: _ZERO)
    for issue in issues:
        if issue.consumed_total != issue.quantity:
            problems.append(
                f"issue {issue.issue_id} consumptions {issue.consumed_total} != quantity {issue.quantity}"
            )
        for line in issue.consumptions:
            drawn[line.batch_id] += line.amount

    for batch in batches:
        if batch.consumed != drawn.get(batch.batch_id, _ZERO):
            problems.append(
                f"batch {batch.batch_id} consumed {batch.consumed} but issues drew "
                f"{drawn.get(batch.batch_id, _ZERO)}"
            )

    return ReconciliationResult(
        scope=scope,
        material_id=material_id,
        total_in=total_in,
        total_out=total_out,
        remaining_total=remaining_total,
        batch_count=len(batches),
        issue_count=len(issues),
        discrepancies=tuple(problems),
    )
