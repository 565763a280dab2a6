"""
InventoryLedger.record_issue -- FIFO consumption and atomicity.

Each issue is a single transaction: the issue row, its consumptions and the
decremented batch balances commit together or not at all.
"""

from unittest.mock import patch

import pytest

from stock_kernel.domain.allocation import Allocation, AllocationLine
from stock_kernel.domain.movements import IssueDetails, MovementKind, ReceiptDetails
from stock_kernel.exceptions import (
    InsufficientStockError,
    InternalConsistencyError,
    InvalidQuantityError,
)
from tests.helpers import BRIDGE, CEMENT, GENERAL, STEEL, TUNNEL, D, at


@pytest.fixture
def stocked(ledger):
    """100 @ t0 labelled LOT-A, 50 @ t0+1h unlabelled."""
    first = ledger.record_receipt(
        BRIDGE, CEMENT, "100", at(0), ReceiptDetails(batch_label="LOT-A")
    )
    second = ledger.record_receipt(BRIDGE, CEMENT, "50", at(hours=1))
    return ledger, first, second


class TestFifoIssue:
    def test_spans_oldest_batches_first(self, stocked):
        ledger, first, second = stocked
        record = ledger.record_issue(BRIDGE, CEMENT, "120", at(hours=2))

        assert record.kind is MovementKind.OUT
        assert record.quantity == D("120.000")
        assert record.batch_summary == f"LOT-A (100.000), Batch-{second.movement_id} (20.000)"

        batches = ledger.get_available_batches(BRIDGE, CEMENT)
        assert [(b.batch_id, b.remaining) for b in batches] == [
            (second.movement_id, D("30.000"))
        ]

    def test_partial_issue_leaves_oldest_open(self, stocked):
        ledger, first, _ = stocked
        record = ledger.record_issue(BRIDGE, CEMENT, "40")
        assert record.batch_summary == "LOT-A (40.000)"
        oldest = ledger.get_available_batches(BRIDGE, CEMENT)[0]
        assert oldest.batch_id == first.movement_id
        assert oldest.remaining == D("60.000")

    def test_successive_issues_continue_where_previous_stopped(self, stocked):
        ledger, first, second = stocked
        ledger.record_issue(BRIDGE, CEMENT, "90")
        record = ledger.record_issue(BRIDGE, CEMENT, "30")
        assert record.batch_summary == (
            f"LOT-A (10.000), Batch-{second.movement_id} (20.000)"
        )

    def test_exact_balance_empties_partition(self, stocked):
        ledger, _, _ = stocked
        ledger.record_issue(BRIDGE, CEMENT, "150")
        assert ledger.get_available_batches(BRIDGE, CEMENT) == []
        assert ledger.get_stats(BRIDGE, CEMENT).current_stock == 0

    def test_backdated_receipt_is_consumed_first(self, ledger):
        late = ledger.record_receipt(BRIDGE, CEMENT, "10", at(hours=5))
        early = ledger.record_receipt(BRIDGE, CEMENT, "10", at(hours=1))
        record = ledger.record_issue(BRIDGE, CEMENT, "15")
        assert record.batch_summary == (
            f"Batch-{early.movement_id} (10.000), Batch-{late.movement_id} (5.000)"
        )

    def test_equal_receipt_times_consumed_in_id_order(self, ledger):
        a = ledger.record_receipt(BRIDGE, CEMENT, "10", at(0))
        b = ledger.record_receipt(BRIDGE, CEMENT, "10", at(0))
        record = ledger.record_issue(BRIDGE, CEMENT, "12")
        assert record.batch_summary == (
            f"Batch-{a.movement_id} (10.000), Batch-{b.movement_id} (2.000)"
        )

    def test_issue_details_persisted(self, stocked):
        ledger, _, _ = stocked
        ledger.record_issue(
            BRIDGE,
            CEMENT,
            "10",
            at(hours=3),
            IssueDetails(
                recipient="Site crew B",
                recipient_designation="Foreman",
                store_incharge="R. Rao",
                weight="500",
                units_count=10,
                remarks="pier 4",
            ),
        )
        record = ledger.get_history(BRIDGE, limit=1)[0]
        assert record.recipient == "Site crew B"
        assert record.recipient_designation == "Foreman"
        assert record.store_incharge == "R. Rao"
        assert record.weight == D("500.000")
        assert record.units_count == 10
        assert record.remarks == "pier 4"

    def test_logs_issue_recorded(self, stocked, captured_logs):
        ledger, _, _ = stocked
        ledger.record_issue(BRIDGE, CEMENT, "120")
        (log,) = [r for r in captured_logs() if r["message"] == "issue_recorded"]
        assert log["operation"] == "record_issue"
        assert log["quantity"] == "120.000"
        assert log["partition"] == "project:1/material:10"
        assert log["batches_consumed"] == 2
        assert log["batch_summary"].startswith("LOT-A (100.000)")
        assert "duration_ms" in log


class TestPartitionIsolation:
    def test_other_project_stock_is_not_eligible(self, ledger):
        ledger.record_receipt(TUNNEL, CEMENT, "500")
        ledger.record_receipt(BRIDGE, CEMENT, "10")
        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.record_issue(BRIDGE, CEMENT, "11")
        assert exc_info.value.available == D("10.000")

    def test_other_material_stock_is_not_eligible(self, ledger):
        ledger.record_receipt(BRIDGE, STEEL, "500")
        with pytest.raises(InsufficientStockError):
            ledger.record_issue(BRIDGE, CEMENT, "1")

    def test_general_store_is_not_eligible_for_projects(self, ledger):
        ledger.record_receipt(GENERAL, CEMENT, "500")
        with pytest.raises(InsufficientStockError):
            ledger.record_issue(BRIDGE, CEMENT, "1")


class TestIssueRejections:
    def test_insufficient_stock_changes_nothing(self, stocked, captured_logs):
        ledger, _, _ = stocked
        before = ledger.get_available_batches(BRIDGE, CEMENT)

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.record_issue(BRIDGE, CEMENT, "150.001")

        assert exc_info.value.available == D("150.000")
        assert exc_info.value.requested == D("150.001")
        assert ledger.get_available_batches(BRIDGE, CEMENT) == before
        assert all(r.kind is MovementKind.IN for r in ledger.get_history())
        assert any(r["message"] == "issue_insufficient_stock" for r in captured_logs())

    def test_issue_on_empty_partition(self, ledger):
        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.record_issue(GENERAL, CEMENT, "1")
        assert exc_info.value.available == 0

    @pytest.mark.parametrize("quantity", ["0", "-1", "NaN", "-inf", "x", "0.0001"])
    def test_invalid_quantity(self, stocked, quantity):
        ledger, _, _ = stocked
        with pytest.raises(InvalidQuantityError):
            ledger.record_issue(BRIDGE, CEMENT, quantity)
        assert ledger.get_stats(BRIDGE, CEMENT).total_out == 0

    def test_negative_issue_weight(self, stocked):
        ledger, _, _ = stocked
        with pytest.raises(InvalidQuantityError):
            ledger.record_issue(BRIDGE, CEMENT, "1", details=IssueDetails(weight="-2"))
        assert ledger.get_stats(BRIDGE, CEMENT).total_out == 0


class TestIssueAtomicity:
    def test_inconsistent_allocation_rolls_back(self, stocked):
        """A corrupted allocation aborts the whole issue; balances are untouched."""
        ledger, first, _ = stocked

        def corrupt(**kwargs):
            return Allocation(
                scope_key=kwargs["scope_key"],
                material_id=kwargs["material_id"],
                requested=kwargs["requested"],
                available=D("150"),
                lines=(AllocationLine(first.movement_id, D("10"), D("100")),),
            )

        with patch("stock_services.inventory_ledger.allocate_fifo", side_effect=corrupt):
            with pytest.raises(InternalConsistencyError):
                ledger.record_issue(BRIDGE, CEMENT, "120")

        assert ledger.get_stats(BRIDGE, CEMENT).current_stock == D("150.000")
        assert [b.remaining for b in ledger.get_available_batches(BRIDGE, CEMENT)] == [
            D("100.000"),
            D("50.000"),
        ]
        assert ledger.reconcile(BRIDGE, CEMENT).is_consistent

    def test_failure_after_decrement_rolls_back(self, stocked):
        ledger, _, _ = stocked
        with patch(
            "stock_services.inventory_ledger.issue_record",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(RuntimeError):
                ledger.record_issue(BRIDGE, CEMENT, "120")

        assert ledger.get_stats(BRIDGE, CEMENT).total_out == 0
        assert [b.remaining for b in ledger.get_available_batches(BRIDGE, CEMENT)] == [
            D("100.000"),
            D("50.000"),
        ]

    def test_lock_released_after_failure(self, stocked):
        ledger, _, _ = stocked
        with pytest.raises(InsufficientStockError):
            ledger.record_issue(BRIDGE, CEMENT, "1000")
        ledger.record_issue(BRIDGE, CEMENT, "1")
