"""Pure domain layer - scopes, quantities, clocks and movement value objects."""

from stock_kernel.domain.allocation import Allocation, AllocationLine, BatchBalance
from stock_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
    resolve_movement_time,
)
from stock_kernel.domain.movements import (
    BatchSnapshot,
    ConsumptionLine,
    IssueDetails,
    IssueSnapshot,
    MovementKind,
    ReceiptDetails,
    summarize_consumptions,
)
from stock_kernel.domain.quantities import (
    format_quantity,
    normalize_quantity,
    normalize_units,
    normalize_weight,
)
from stock_kernel.domain.scope import (
    GENERAL_STORE,
    GeneralScope,
    Partition,
    ProjectScope,
    Scope,
    ScopeKind,
    project_id_of,
    scope_for_project,
)

__all__ = [
    "Allocation",
    "AllocationLine",
    "BatchBalance",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "resolve_movement_time",
    "MovementKind",
    "ReceiptDetails",
    "IssueDetails",
    "ConsumptionLine",
    "BatchSnapshot",
    "IssueSnapshot",
    "summarize_consumptions",
    "normalize_quantity",
    "normalize_weight",
    "normalize_units",
    "format_quantity",
    "Scope",
    "ScopeKind",
    "ProjectScope",
    "GeneralScope",
    "GENERAL_STORE",
    "Partition",
    "scope_for_project",
    "project_id_of",
]
