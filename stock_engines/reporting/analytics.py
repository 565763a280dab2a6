"""
Module: stock_engines.reporting.analytics
Responsibility:
    System-wide inventory analytics: received / issued / on-hand totals across
    every scope, and the per-scope, per-material consumption breakdown.

Architecture position:
    Engines -- pure, zero I/O.

Invariants enforced:
    - On-hand quantity is the sum of batch remaining balances, not
      received - issued.  The two agree whenever the ledger is consistent;
      reconcile() reports any difference.
    - Weight and unit totals in the breakdown are None when they sum to zero,
      so a material that never carried weights does not report "0 weight".
    - Breakdown order: scope label, then material name (ids when unnamed).
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

from stock_engines.reporting.directory import ScopeDirectory
from stock_engines.reporting.stats import sum_present, sum_present_units
from stock_engines.tracer import traced_engine
from stock_kernel.domain.movements import BatchSnapshot, IssueSnapshot
from stock_kernel.domain.scope import Scope

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class MaterialConsumption:
    material_id: int
    material_name: str | None
    quantity_consumed: Decimal
    weight_consumed: Decimal | None
    units_consumed: int | None


@dataclass(frozen=True, slots=True)
class ScopeConsumption:
    scope: Scope
    project_id: int
    project_name: str | None
    materials: tuple[MaterialConsumption, ...]


@dataclass(frozen=True, slots=True)
class InventoryAnalytics:
    """System-wide figures plus the consumption breakdown."""

    total_scopes: int
    total_materials: int
    total_quantity_in: Decimal
    total_quantity_out: Decimal
    total_quantity_on_hand: Decimal
    total_weight_in: Decimal
    total_weight_out: Decimal
    total_weight_on_hand: Decimal
    total_units_in: int
    total_units_out: int
    total_units_on_hand: int
    consumption: tuple[ScopeConsumption, ...]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for row, scope_row in zip(data["consumption"], self.consumption):
            row["scope"] = scope_row.scope.key
        return data


def _nonzero_or_none(value):
    return value if value else None


def build_consumption_breakdown(
    issues: Iterable[IssueSnapshot],
    directory: ScopeDirectory,
) -> tuple[ScopeConsumption, ...]:
    """Group issues by scope then material and sum quantity, weight and units."""
    grouped: dict[Scope, dict[int, list[IssueSnapshot]]] = defaultdict(lambda: defaultdict(list))
    for issue in issues:
        grouped[issue.scope][issue.material_id].append(issue)

    result: list[ScopeConsumption] = []
    for scope, by_material in grouped.items():
        materials = [
            MaterialConsumption(
                material_id=material_id,
                material_name=directory.material_name(material_id),
                quantity_consumed=sum_present(i.quantity for i in rows),
                weight_consumed=_nonzero_or_none(sum_present(i.details.weight for i in rows)),
                units_consumed=_nonzero_or_none(sum_present_units(i.details.units_count for i in rows)),
            )
            for material_id, rows in by_material.items()
        ]
        materials.sort(key=lambda m: (directory.material_sort_label(m.material_id), m.material_id))
        result.append(
            ScopeConsumption(
                scope=scope,
                project_id=directory.project_id(scope),
                project_name=directory.project_name(scope),
                materials=tuple(materials),
            )
        )

    result.sort(key=lambda s: (directory.scope_sort_label(s.scope), s.project_id))
    return tuple(result)


@traced_engine("inventory_analytics", "1.0")
def build_analytics(
    *,
    batches: Iterable[BatchSnapshot],
    issues: Iterable[IssueSnapshot],
    directory: ScopeDirectory,
) -> InventoryAnalytics:
    batches = list(batches)
    issues = list(issues)

    weight_in = sum_present(b.details.weight for b in batches)
    weight_out = sum_present(i.details.weight for i in issues)
    units_in = sum_present_units(b.details.units_count for b in batches)
    units_out = sum_present_units(i.details.units_count for i in issues)

    scopes = {b.scope for b in batches} | {i.scope for i in issues}
    materials = {b.material_id for b in batches} | {i.material_id for i in issues}

    return InventoryAnalytics(
        total_scopes=len(scopes),
        total_materials=len(materials),
        total_quantity_in=sum_present(b.quantity for b in batches),
        total_quantity_out=sum_present(i.quantity for i in issues),
        total_quantity_on_hand=sum_present(b.remaining for b in batches),
        total_weight_in=weight_in,
        total_weight_out=weight_out,
        total_weight_on_hand=weight_in - weight_out,
        total_units_in=units_in,
        total_units_out=units_out,
        total_units_on_hand=units_in - units_out,
        consumption=build_consumption_breakdown(issues, directory),
    )
