"""Pure report builders: history, statistics, analytics, reconciliation."""

from stock_engines.reporting.analytics import (
    InventoryAnalytics,
    MaterialConsumption,
    ScopeConsumption,
    build_analytics,
    build_consumption_breakdown,
)
from stock_engines.reporting.detail import (
    MaterialDetail,
    MovementReport,
    build_material_detail,
    build_movement_report,
)
from stock_engines.reporting.directory import (
    MappingNameResolver,
    NameResolver,
    NullNameResolver,
    ScopeDirectory,
)
from stock_engines.reporting.history import (
    MovementRecord,
    issue_record,
    merge_history,
    receipt_record,
    sort_history,
)
from stock_engines.reporting.reconciliation import ReconciliationResult, reconcile_partition
from stock_engines.reporting.stats import MaterialStats, build_material_stats

__all__ = [
    "MaterialDetail",
    "MovementReport",
    "build_material_detail",
    "build_movement_report",
    "InventoryAnalytics",
    "MaterialConsumption",
    "ScopeConsumption",
    "build_analytics",
    "build_consumption_breakdown",
    "NameResolver",
    "NullNameResolver",
    "MappingNameResolver",
    "ScopeDirectory",
    "MovementRecord",
    "receipt_record",
    "issue_record",
    "merge_history",
    "sort_history",
    "ReconciliationResult",
    "reconcile_partition",
    "MaterialStats",
    "build_material_stats",
]
