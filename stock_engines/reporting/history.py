"""
Module: stock_engines.reporting.history
Responsibility:
    Turn batch and issue snapshots into MovementRecord rows and merge them
    into one time-descending history.

Architecture position:
    Engines -- pure, zero I/O.

Invariants enforced:
    - Deterministic order for equal timestamps: issues before receipts, then
      higher movement id first.  Receipts and issues share a timestamp when a
      caller records both "now" in the same instant, or two date-only
      movements fall on the same day.
    - Receipt rows carry ``remaining``; issue rows carry ``batch_summary``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from stock_engines.reporting.directory import ScopeDirectory
from stock_kernel.domain.movements import BatchSnapshot, IssueSnapshot, MovementKind
from stock_kernel.domain.scope import Scope


@dataclass(frozen=True, slots=True)
class MovementRecord:
    """
    One row of movement history.

    Contract:
        ``project_id`` is the reporting id: the real project id, or the
        reserved general-store id.  ``scope`` keeps the exact partition.
    """

    movement_id: int
    kind: MovementKind
    scope: Scope
    project_id: int
    project_name: str | None
    material_id: int
    material_name: str | None
    quantity: Decimal
    movement_time: datetime
    weight: Decimal | None = None
    units_count: int | None = None
    # Receipt fields
    batch_label: str | None = None
    remaining: Decimal | None = None
    supplier: str | None = None
    invoice_number: str | None = None
    invoice_date: date | None = None
    invoice_quantity: Decimal | None = None
    vehicle_number: str | None = None
    # Issue fields
    batch_summary: str | None = None
    recipient: str | None = None
    recipient_designation: str | None = None
    store_incharge: str | None = None
    remarks: str | None = None

    @property
    def sort_key(self) -> tuple[datetime, int, int]:
        return (
            self.movement_time,
            1 if self.kind is MovementKind.OUT else 0,
            self.movement_id,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["scope"] = self.scope.key
        return data


def receipt_record(batch: BatchSnapshot, directory: ScopeDirectory) -> MovementRecord:
    details = batch.details
    return MovementRecord(
        movement_id=batch.batch_id,
        kind=MovementKind.IN,
        scope=batch.scope,
        project_id=directory.project_id(batch.scope),
        project_name=directory.project_name(batch.scope),
        material_id=batch.material_id,
        material_name=directory.material_name(batch.material_id),
        quantity=batch.quantity,
        movement_time=batch.received_at,
        weight=details.weight,
        units_count=details.units_count,
        batch_label=details.batch_label,
        remaining=batch.remaining,
        supplier=details.supplier,
        invoice_number=details.invoice_number,
        invoice_date=details.invoice_date,
        invoice_quantity=details.invoice_quantity,
        vehicle_number=details.vehicle_number,
        remarks=details.remarks,
    )


def issue_record(issue: IssueSnapshot, directory: ScopeDirectory) -> MovementRecord:
    details = issue.details
    return MovementRecord(
        movement_id=issue.issue_id,
        kind=MovementKind.OUT,
        scope=issue.scope,
        project_id=directory.project_id(issue.scope),
        project_name=directory.project_name(issue.scope),
        material_id=issue.material_id,
        material_name=directory.material_name(issue.material_id),
        quantity=issue.quantity,
        movement_time=issue.issued_at,
        weight=details.weight,
        units_count=details.units_count,
        batch_summary=issue.batch_summary,
        recipient=details.recipient,
        recipient_designation=details.recipient_designation,
        store_incharge=details.store_incharge,
        remarks=details.remarks,
    )


def sort_history(records: Iterable[MovementRecord]) -> list[MovementRecord]:
    """Newest first; issues before receipts at the same instant; then id DESC."""
    return sorted(records, key=lambda r: r.sort_key, reverse=True)


def merge_history(
    batches: Iterable[BatchSnapshot],
    issues: Iterable[IssueSnapshot],
    directory: ScopeDirectory,
    limit: int | None = None,
) -> list[MovementRecord]:
    """
    Merged receipts and issues, newest first.

    Args:
        limit: Keep only the N most recent rows.  None keeps everything.

    Raises:
        ValueError: negative limit.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"History limit must not be negative, got {limit}")

    records = [receipt_record(b, directory) for b in batches]
    records.extend(issue_record(i, directory) for i in issues)
    ordered = sort_history(records)
    return ordered if limit is None else ordered[:limit]
