"""
Statistics, analytics, material detail and movement report builders.

All inputs are snapshots; the engines never touch the database.
"""

from decimal import Decimal

from stock_engines.reporting.analytics import build_analytics, build_consumption_breakdown
from stock_engines.reporting.detail import build_material_detail, build_movement_report
from stock_engines.reporting.directory import (
    MappingNameResolver,
    NameResolver,
    NullNameResolver,
    ScopeDirectory,
)
from stock_engines.reporting.history import merge_history
from stock_engines.reporting.stats import build_material_stats
from stock_kernel.domain.movements import (
    BatchSnapshot,
    ConsumptionLine,
    IssueDetails,
    IssueSnapshot,
    MovementKind,
    ReceiptDetails,
)
from tests.helpers import BRIDGE, CEMENT, GENERAL, STEEL, TUNNEL, D, at

NAMES = MappingNameResolver(
    projects={1: "Bridge", 2: "Tunnel"},
    materials={CEMENT: "Cement", STEEL: "Steel"},
)
DIRECTORY = ScopeDirectory(names=NAMES)


def _batch(batch_id, scope, material_id, quantity, remaining, received_at, weight=None, units=None):
    return BatchSnapshot(
        batch_id=batch_id,
        scope=scope,
        material_id=material_id,
        quantity=D(quantity),
        remaining=D(remaining),
        received_at=received_at,
        details=ReceiptDetails(weight=weight, units_count=units),
    )


def _issue(issue_id, scope, material_id, quantity, issued_at, weight=None, units=None, consumptions=()):
    return IssueSnapshot(
        issue_id=issue_id,
        scope=scope,
        material_id=material_id,
        quantity=D(quantity),
        issued_at=issued_at,
        details=IssueDetails(weight=weight, units_count=units),
        consumptions=tuple(consumptions),
    )


# The canonical two-batch scenario: 100 @ t0, 50 @ t0+1h, issue 120 @ t0+2h
SCENARIO_BATCHES = [
    _batch(1, BRIDGE, CEMENT, "100", "0", at(0), weight=D("1000"), units=10),
    _batch(2, BRIDGE, CEMENT, "50", "30", at(hours=1), weight=D("500"), units=5),
]
SCENARIO_ISSUES = [
    _issue(
        1, BRIDGE, CEMENT, "120", at(hours=2), weight=D("1200"), units=12,
        consumptions=[ConsumptionLine(1, D("100")), ConsumptionLine(2, D("20"))],
    ),
]


class TestMaterialStats:
    def test_scenario_figures(self):
        stats = build_material_stats(BRIDGE, CEMENT, SCENARIO_BATCHES, SCENARIO_ISSUES, "Cement")
        assert stats.total_in == D("150")
        assert stats.total_out == D("120")
        assert stats.current_stock == D("30")
        assert stats.total_in_weight == D("1500")
        assert stats.current_weight == D("300")
        assert stats.total_in_units == 15
        assert stats.current_units == 3
        assert stats.last_in_time == at(hours=1)
        assert stats.last_out_time == at(hours=2)
        assert stats.material_name == "Cement"

    def test_other_partitions_ignored(self):
        extra = [
            _batch(3, TUNNEL, CEMENT, "999", "999", at(0)),
            _batch(4, BRIDGE, STEEL, "999", "999", at(0)),
            _batch(5, GENERAL, CEMENT, "999", "999", at(0)),
        ]
        stats = build_material_stats(BRIDGE, CEMENT, SCENARIO_BATCHES + extra, SCENARIO_ISSUES)
        assert stats.total_in == D("150")

    def test_empty_partition(self):
        stats = build_material_stats(BRIDGE, CEMENT, [], [])
        assert stats.total_in == stats.total_out == stats.current_stock == 0
        assert stats.total_in_weight == 0
        assert stats.total_in_units == 0
        assert stats.last_in_time is None
        assert stats.last_out_time is None

    def test_absent_weights_skipped(self):
        batches = [
            _batch(1, BRIDGE, CEMENT, "10", "10", at(0), weight=D("4")),
            _batch(2, BRIDGE, CEMENT, "10", "10", at(0)),
        ]
        stats = build_material_stats(BRIDGE, CEMENT, batches, [])
        assert stats.total_in_weight == D("4")

    def test_to_dict(self):
        data = build_material_stats(BRIDGE, CEMENT, SCENARIO_BATCHES, SCENARIO_ISSUES).to_dict()
        assert data["scope"] == "project:1"
        assert data["current_stock"] == D("30")


class TestAnalytics:
    def test_system_totals(self):
        batches = SCENARIO_BATCHES + [
            _batch(3, GENERAL, STEEL, "40", "40", at(0), weight=D("80")),
        ]
        analytics = build_analytics(batches=batches, issues=SCENARIO_ISSUES, directory=DIRECTORY)

        assert analytics.total_scopes == 2
        assert analytics.total_materials == 2
        assert analytics.total_quantity_in == D("190")
        assert analytics.total_quantity_out == D("120")
        assert analytics.total_quantity_on_hand == D("70")
        assert analytics.total_weight_in == D("1580")
        assert analytics.total_weight_out == D("1200")
        assert analytics.total_weight_on_hand == D("380")
        assert analytics.total_units_on_hand == 3

    def test_on_hand_is_sum_of_remaining(self):
        # A drifted batch shows up in on-hand even though in - out disagrees
        batches = [_batch(1, BRIDGE, CEMENT, "100", "95", at(0))]
        analytics = build_analytics(batches=batches, issues=[], directory=DIRECTORY)
        assert analytics.total_quantity_on_hand == D("95")

    def test_empty_ledger(self):
        analytics = build_analytics(batches=[], issues=[], directory=DIRECTORY)
        assert analytics.total_scopes == 0
        assert analytics.total_quantity_on_hand == 0
        assert analytics.consumption == ()

    def test_to_dict_renders_scope_keys(self):
        analytics = build_analytics(
            batches=SCENARIO_BATCHES, issues=SCENARIO_ISSUES, directory=DIRECTORY
        )
        data = analytics.to_dict()
        assert data["consumption"][0]["scope"] == "project:1"
        assert data["consumption"][0]["materials"][0]["quantity_consumed"] == D("120")


class TestConsumptionBreakdown:
    def test_grouped_and_sorted_by_name(self):
        issues = [
            _issue(1, TUNNEL, STEEL, "5", at(0)),
            _issue(2, BRIDGE, STEEL, "7", at(0), weight=D("70")),
            _issue(3, BRIDGE, CEMENT, "3", at(0), units=2),
            _issue(4, BRIDGE, CEMENT, "4", at(1), units=1),
            _issue(5, GENERAL, CEMENT, "1", at(0)),
        ]
        breakdown = build_consumption_breakdown(issues, DIRECTORY)

        assert [s.project_name for s in breakdown] == ["Bridge", "General Store", "Tunnel"]
        bridge = breakdown[0]
        assert [m.material_name for m in bridge.materials] == ["Cement", "Steel"]
        cement, steel = bridge.materials
        assert cement.quantity_consumed == D("7")
        assert cement.units_consumed == 3
        assert cement.weight_consumed is None
        assert steel.weight_consumed == D("70")
        assert steel.units_consumed is None
        assert breakdown[1].project_id == 0

    def test_unnamed_scopes_fall_back_to_ids(self):
        directory = ScopeDirectory(names=NullNameResolver())
        issues = [_issue(1, TUNNEL, CEMENT, "1", at(0)), _issue(2, BRIDGE, CEMENT, "1", at(0))]
        breakdown = build_consumption_breakdown(issues, directory)
        assert [s.project_id for s in breakdown] == [1, 2]
        assert breakdown[0].project_name is None


class TestScopeDirectory:
    def test_resolver_protocol(self):
        assert isinstance(NAMES, NameResolver)
        assert isinstance(NullNameResolver(), NameResolver)

    def test_custom_general_store_identity(self):
        directory = ScopeDirectory(
            names=NAMES, general_store_project_id=999, general_store_label="Central Yard"
        )
        assert directory.project_id(GENERAL) == 999
        assert directory.project_name(GENERAL) == "Central Yard"
        assert directory.project_id(BRIDGE) == 1


class TestMaterialDetail:
    def test_sections(self):
        detail = build_material_detail(
            BRIDGE, CEMENT, SCENARIO_BATCHES, SCENARIO_ISSUES, DIRECTORY
        )
        assert [r.movement_id for r in detail.inwards] == [1, 2]
        assert [r.movement_id for r in detail.outwards] == [1]
        assert [r.kind for r in detail.history] == [
            MovementKind.OUT,
            MovementKind.IN,
            MovementKind.IN,
        ]
        assert detail.stats.current_stock == D("30")
        assert detail.to_dict()["stats"]["material_name"] == "Cement"

    def test_outwards_newest_first(self):
        issues = [
            _issue(1, BRIDGE, CEMENT, "1", at(hours=1)),
            _issue(2, BRIDGE, CEMENT, "1", at(hours=3)),
            _issue(3, BRIDGE, CEMENT, "1", at(hours=2)),
        ]
        detail = build_material_detail(BRIDGE, CEMENT, [], issues, DIRECTORY)
        assert [r.movement_id for r in detail.outwards] == [2, 3, 1]


class TestMovementReport:
    def test_totals(self):
        history = merge_history(SCENARIO_BATCHES, SCENARIO_ISSUES, DIRECTORY)
        report = build_movement_report(BRIDGE, history)
        assert report.total_in_quantity == D("150")
        assert report.total_out_quantity == D("120")
        assert len(report.movements) == 3
        assert report.to_dict()["scope"] == "project:1"

    def test_all_scopes(self):
        report = build_movement_report(None, [])
        assert report.total_in_quantity == Decimal("0")
        assert report.to_dict()["scope"] is None
