"""
Composite views built from history and statistics.

``MaterialDetail`` is the material page of a project: statistics, receipts
oldest first, issues newest first and the merged history.  ``MovementReport``
is the movements listing with its in/out totals.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from stock_engines.reporting.directory import ScopeDirectory
from stock_engines.reporting.history import (
    MovementRecord,
    issue_record,
    receipt_record,
    sort_history,
)
from stock_engines.reporting.stats import MaterialStats, build_material_stats
from stock_kernel.domain.movements import BatchSnapshot, IssueSnapshot, MovementKind
from stock_kernel.domain.scope import Scope

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class MaterialDetail:
    stats: MaterialStats
    inwards: tuple[MovementRecord, ...]
    outwards: tuple[MovementRecord, ...]
    history: tuple[MovementRecord, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "inwards": [r.to_dict() for r in self.inwards],
            "outwards": [r.to_dict() for r in self.outwards],
            "history": [r.to_dict() for r in self.history],
        }


@dataclass(frozen=True, slots=True)
class MovementReport:
    scope: Scope | None
    movements: tuple[MovementRecord, ...]
    total_in_quantity: Decimal
    total_out_quantity: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope.key if self.scope is not None else None,
            "movements": [r.to_dict() for r in self.movements],
            "total_in_quantity": self.total_in_quantity,
            "total_out_quantity": self.total_out_quantity,
        }


def build_material_detail(
    scope: Scope,
    material_id: int,
    batches: Iterable[BatchSnapshot],
    issues: Iterable[IssueSnapshot],
    directory: ScopeDirectory,
) -> MaterialDetail:
    batches = [b for b in batches if b.scope == scope and b.material_id == material_id]
    issues = [i for i in issues if i.scope == scope and i.material_id == material_id]

    inwards = sorted(
        (receipt_record(b, directory) for b in batches),
        key=lambda r: (r.movement_time, r.movement_id),
    )
    outwards = sorted(
        (issue_record(i, directory) for i in issues),
        key=lambda r: (r.movement_time, r.movement_id),
        reverse=True,
    )
    return MaterialDetail(
        stats=build_material_stats(
            scope, material_id, batches, issues, directory.material_name(material_id)
        ),
        inwards=tuple(inwards),
        outwards=tuple(outwards),
        history=tuple(sort_history([*inwards, *outwards])),
    )


def build_movement_report(
    scope: Scope | None,
    history: Iterable[MovementRecord],
) -> MovementReport:
    movements = tuple(history)
    return MovementReport(
        scope=scope,
        movements=movements,
        total_in_quantity=sum(
            (r.quantity for r in movements if r.kind is MovementKind.IN), _ZERO
        ),
        total_out_quantity=sum(
            (r.quantity for r in movements if r.kind is MovementKind.OUT), _ZERO
        ),
    )
