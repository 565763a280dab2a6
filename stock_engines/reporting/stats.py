"""
Per-material statistics, recomputed from snapshots on every call.

Weight and unit counts are optional on each movement; absent values are
skipped, so a partition where nothing carried a weight reports zero weight.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from stock_kernel.domain.movements import BatchSnapshot, IssueSnapshot
from stock_kernel.domain.scope import Scope

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class MaterialStats:
    """Received / issued / on-hand figures for one (scope, material)."""

    scope: Scope
    material_id: int
    material_name: str | None
    total_in: Decimal
    total_out: Decimal
    current_stock: Decimal
    total_in_weight: Decimal
    total_out_weight: Decimal
    current_weight: Decimal
    total_in_units: int
    total_out_units: int
    current_units: int
    last_in_time: datetime | None
    last_out_time: datetime | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["scope"] = self.scope.key
        return data


def sum_present(values: Iterable[Decimal | None]) -> Decimal:
    """Sum ignoring None."""
    return sum((v for v in values if v is not None), _ZERO)


def sum_present_units(values: Iterable[int | None]) -> int:
    return sum(v for v in values if v is not None)


def build_material_stats(
    scope: Scope,
    material_id: int,
    batches: Iterable[BatchSnapshot],
    issues: Iterable[IssueSnapshot],
    material_name: str | None = None,
) -> MaterialStats:
    """
    Aggregate one partition.

    Snapshots belonging to other partitions are ignored, so callers may pass
    a whole scope's worth of rows.
    """
    batches = [b for b in batches if b.scope == scope and b.material_id == material_id]
    issues = [i for i in issues if i.scope == scope and i.material_id == material_id]

    total_in = sum_present(b.quantity for b in batches)
    total_out = sum_present(i.quantity for i in issues)
    in_weight = sum_present(b.details.weight for b in batches)
    out_weight = sum_present(i.details.weight for i in issues)
    in_units = sum_present_units(b.details.units_count for b in batches)
    out_units = sum_present_units(i.details.units_count for i in issues)

    return MaterialStats(
        scope=scope,
        material_id=material_id,
        material_name=material_name,
        total_in=total_in,
        total_out=total_out,
        current_stock=total_in - total_out,
        total_in_weight=in_weight,
        total_out_weight=out_weight,
        current_weight=in_weight - out_weight,
        total_in_units=in_units,
        total_out_units=out_units,
        current_units=in_units - out_units,
        last_in_time=max((b.received_at for b in batches), default=None),
        last_out_time=max((i.issued_at for i in issues), default=None),
    )
