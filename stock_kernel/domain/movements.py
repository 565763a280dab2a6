"""
Movement value objects.

Immutable records passed between the ledger service, the ORM layer and the
pure reporting engines.  Nothing here touches the database: selectors convert
ORM rows into ``BatchSnapshot`` / ``IssueSnapshot`` and the engines only ever
see those.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from stock_kernel.domain.quantities import format_quantity
from stock_kernel.domain.scope import Scope


class MovementKind(str, Enum):
    """Direction of a stock movement."""

    IN = "IN"
    OUT = "OUT"


@dataclass(frozen=True, slots=True)
class ReceiptDetails:
    """
    Descriptive metadata attached to a receipt.

    Carried for reporting only; the allocator never reads it.  ``weight``
    and ``units_count`` feed the optional weight and unit statistics.
    """

    batch_label: str | None = None
    supplier: str | None = None
    invoice_number: str | None = None
    invoice_date: date | None = None
    invoice_quantity: Decimal | None = None
    vehicle_number: str | None = None
    weight: Decimal | None = None
    units_count: int | None = None
    remarks: str | None = None


@dataclass(frozen=True, slots=True)
class IssueDetails:
    """Descriptive metadata attached to an issue (who took it, who handed it over)."""

    recipient: str | None = None
    recipient_designation: str | None = None
    store_incharge: str | None = None
    weight: Decimal | None = None
    units_count: int | None = None
    remarks: str | None = None


@dataclass(frozen=True, slots=True)
class ConsumptionLine:
    """How much of one batch was drawn to satisfy an issue."""

    batch_id: int
    amount: Decimal
    batch_label: str | None = None

    @property
    def display_label(self) -> str:
        return self.batch_label or f"Batch-{self.batch_id}"


def summarize_consumptions(lines: tuple[ConsumptionLine, ...] | list[ConsumptionLine]) -> str:
    """``"LOT-A (100.000), Batch-7 (20.000)"`` in allocation order."""
    return ", ".join(
        f"{line.display_label} ({format_quantity(line.amount)})" for line in lines
    )


@dataclass(frozen=True, slots=True)
class BatchSnapshot:
    """Read-only view of one batch as committed."""

    batch_id: int
    scope: Scope
    material_id: int
    quantity: Decimal
    remaining: Decimal
    received_at: datetime
    details: ReceiptDetails = field(default_factory=ReceiptDetails)

    @property
    def consumed(self) -> Decimal:
        return self.quantity - self.remaining

    @property
    def display_label(self) -> str:
        return self.details.batch_label or f"Batch-{self.batch_id}"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["scope"] = self.scope.key
        data["batch_label"] = self.display_label
        return data


@dataclass(frozen=True, slots=True)
class IssueSnapshot:
    """Read-only view of one issue with its consumptions in allocation order."""

    issue_id: int
    scope: Scope
    material_id: int
    quantity: Decimal
    issued_at: datetime
    details: IssueDetails = field(default_factory=IssueDetails)
    consumptions: tuple[ConsumptionLine, ...] = ()

    @property
    def consumed_total(self) -> Decimal:
        return sum((line.amount for line in self.consumptions), Decimal("0"))

    @property
    def batch_summary(self) -> str:
        return summarize_consumptions(self.consumptions)
