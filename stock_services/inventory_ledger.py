"""
InventoryLedger -- FIFO stock ledger for projects and the general store.

Responsibility:
    Single entry point for the orchestration layer: records receipts and
    issues, and answers statistics, history and analytics queries.  Owns the
    transaction boundary of every operation.

Architecture position:
    Services -- orchestration.  Composes kernel selectors and the StockWriter
    with the pure engines in ``stock_engines``.

    record_receipt:  normalize -> StockWriter.add_batch -> commit
    record_issue:    normalize -> partition lock -> lock_eligible (FOR UPDATE)
                     -> allocate_fifo -> StockWriter.apply_allocation -> commit

Invariants enforced:
    - Every mutating call is exactly one ``session_scope``: the new issue, its
      consumptions and the decremented balances commit together or not at all.
    - Issues on the same (scope, material) are serialized: the in-process
      partition lock is held until after commit, and the eligible batch rows
      are selected FOR UPDATE.
    - Quantities are normalized to three decimals (half-up) before anything
      is read or written.  Invalid input never opens a transaction.
    - Statistics and history are recomputed from committed rows on every call.

Failure modes:
    - InvalidQuantityError: non-positive, NaN, infinite or non-numeric amount.
    - InsufficientStockError: the partition holds less than requested;
      carries ``available``.  Nothing is written.
    - InternalConsistencyError: the allocation walk disagreed with the
      availability check.  The transaction is rolled back.
    - AllocationConflictError: partition lock not acquired within
      ``lock_timeout_seconds``.  Retryable.

Usage:
    ledger = InventoryLedger.from_config(get_active_config())
    ledger.record_receipt(ProjectScope(7), material_id=3, quantity="100")
    ledger.record_issue(ProjectScope(7), material_id=3, quantity="40")
    ledger.get_stats(ProjectScope(7), material_id=3).current_stock  # 60.000
"""

from __future__ import annotations

import time
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from stock_config.schema import LedgerConfig
from stock_engines.allocation.fifo import allocate_fifo
from stock_engines.reporting.analytics import InventoryAnalytics, build_analytics
from stock_engines.reporting.detail import (
    MaterialDetail,
    MovementReport,
    build_material_detail,
    build_movement_report,
)
from stock_engines.reporting.directory import NameResolver, NullNameResolver, ScopeDirectory
from stock_engines.reporting.history import (
    MovementRecord,
    issue_record,
    merge_history,
    receipt_record,
)
from stock_engines.reporting.reconciliation import ReconciliationResult, reconcile_partition
from stock_engines.reporting.stats import MaterialStats, build_material_stats
from stock_kernel.db.engine import build_engine, build_session_factory, session_scope
from stock_kernel.domain.allocation import BatchBalance
from stock_kernel.domain.clock import Clock, SystemClock, resolve_movement_time
from stock_kernel.domain.movements import BatchSnapshot, IssueDetails, ReceiptDetails
from stock_kernel.domain.quantities import (
    normalize_quantity,
    normalize_units,
    normalize_weight,
)
from stock_kernel.domain.scope import Partition, Scope, project_id_of
from stock_kernel.exceptions import InsufficientStockError
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.selectors.batch_selector import BatchSelector, batch_to_snapshot
from stock_kernel.selectors.movement_selector import MovementSelector, issue_to_snapshot
from stock_kernel.services.partition_lock import PartitionLocks, default_partition_locks
from stock_kernel.services.stock_writer import StockWriter

logger = get_logger("services.inventory_ledger")


def _check_material_id(material_id: Any) -> int:
    if isinstance(material_id, bool) or not isinstance(material_id, int):
        raise TypeError(f"material_id must be an int, got {material_id!r}")
    if material_id <= 0:
        raise ValueError(f"material_id must be positive, got {material_id}")
    return material_id


def _partition(scope: Scope, material_id: Any) -> Partition:
    project_id_of(scope)  # TypeError for anything that is not a Scope
    return Partition(scope, _check_material_id(material_id))


class InventoryLedger:
    """
    FIFO inventory ledger.

    Contract:
        Receives a session factory, config, clock, name resolver and
        partition lock registry via constructor injection.  Each public
        method opens and closes its own transaction.

    Guarantees:
        - ``record_issue`` either persists the issue, all its consumptions
          and all balance decrements, or nothing.
        - For every (scope, material): received - issued == on-hand ==
          sum of batch remaining, after every committed call.
        - Returned DTOs are frozen and detached from the session.

    Non-goals:
        - Does not resolve or validate project/material existence or their
          linkage; the orchestration layer does that before calling in.
        - Does not retry; AllocationConflictError is left to the caller.
        - No reversal or undo of recorded movements.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        config: LedgerConfig | None = None,
        clock: Clock | None = None,
        names: NameResolver | None = None,
        locks: PartitionLocks | None = None,
    ):
        self._session_factory = session_factory
        self._config = config or LedgerConfig()
        self._clock = clock or SystemClock()
        self._locks = locks or default_partition_locks
        self._directory = ScopeDirectory(
            names=names or NullNameResolver(),
            general_store_project_id=self._config.general_store_project_id,
            general_store_label=self._config.general_store_label,
        )
        self._timezone = self._config.timezone

    @classmethod
    def from_config(
        cls,
        config: LedgerConfig,
        clock: Clock | None = None,
        names: NameResolver | None = None,
    ) -> InventoryLedger:
        """Build a ledger with its own engine from ``config.database_url``."""
        engine = build_engine(
            config.database_url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
        )
        factory = build_session_factory(engine)
        return cls(factory, config=config, clock=clock, names=names)

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def directory(self) -> ScopeDirectory:
        return self._directory

    # =========================================================================
    # Mutations
    # =========================================================================

    def record_receipt(
        self,
        scope: Scope,
        material_id: int,
        quantity: Any,
        received_at: datetime | date | None = None,
        details: ReceiptDetails | None = None,
    ) -> MovementRecord:
        """
        Record an inward receipt as a new batch.

        Args:
            scope: ProjectScope or GeneralScope.
            material_id: Material receiving stock.
            quantity: Amount received; normalized to three decimals.
            received_at: FIFO timestamp.  None means now; a date means the
                start of that day in the configured timezone.
            details: Descriptive metadata (label, invoice, supplier, ...).

        Returns:
            MovementRecord of kind IN with ``remaining == quantity``.

        Raises:
            InvalidQuantityError: quantity (or weight / units) unusable.
        """
        partition = _partition(scope, material_id)
        amount = normalize_quantity(quantity)
        details = self._normalize_receipt_details(details or ReceiptDetails())
        moved_at = resolve_movement_time(received_at, self._clock, self._timezone)

        with LogContext.bind(operation="record_receipt", partition=partition.key):
            with session_scope(self._session_factory) as session:
                batch = StockWriter(session).add_batch(
                    partition,
                    amount,
                    moved_at,
                    details,
                    created_at=self._clock.now(),
                )
                record = receipt_record(batch_to_snapshot(batch), self._directory)

            logger.info(
                "receipt_recorded",
                extra={
                    "batch_id": record.movement_id,
                    "quantity": amount,
                    "received_at": moved_at,
                    "batch_label": details.batch_label,
                },
            )
        return record

    def record_issue(
        self,
        scope: Scope,
        material_id: int,
        quantity: Any,
        issued_at: datetime | date | None = None,
        details: IssueDetails | None = None,
    ) -> MovementRecord:
        """
        Issue stock, consuming the oldest batches first.

        Returns:
            MovementRecord of kind OUT whose ``batch_summary`` lists the
            batches drawn from in allocation order, e.g.
            ``"LOT-A (100.000), Batch-7 (20.000)"``.

        Raises:
            InvalidQuantityError: quantity (or weight / units) unusable.
            InsufficientStockError: less than ``quantity`` on hand.
            InternalConsistencyError: allocation did not add up; rolled back.
            AllocationConflictError: partition busy past the lock timeout.
        """
        partition = _partition(scope, material_id)
        amount = normalize_quantity(quantity)
        details = self._normalize_issue_details(details or IssueDetails())
        moved_at = resolve_movement_time(issued_at, self._clock, self._timezone)

        t0 = time.monotonic()
        with LogContext.bind(operation="record_issue", partition=partition.key):
            with self._locks.hold(partition, self._config.lock_timeout_seconds):
                with session_scope(self._session_factory) as session:
                    locked = BatchSelector(session).lock_eligible(partition)

                    logger.debug(
                        "issue_allocation_started",
                        extra={
                            "requested": amount,
                            "eligible_batches": len(locked),
                        },
                    )

                    try:
                        allocation = allocate_fifo(
                            scope_key=partition.scope.key,
                            material_id=partition.material_id,
                            batches=[
                                BatchBalance(
                                    batch_id=b.id,
                                    received_at=b.received_at,
                                    remaining=b.remaining,
                                    batch_label=b.batch_label,
                                )
                                for b in locked
                            ],
                            requested=amount,
                        )
                    except InsufficientStockError as exc:
                        logger.warning(
                            "issue_insufficient_stock",
                            extra={
                                "requested": exc.requested,
                                "available": exc.available,
                            },
                        )
                        raise

                    issue = StockWriter(session).apply_allocation(
                        partition,
                        allocation,
                        locked,
                        issued_at=moved_at,
                        details=details,
                        created_at=self._clock.now(),
                    )
                    record = issue_record(issue_to_snapshot(issue), self._directory)

            logger.info(
                "issue_recorded",
                extra={
                    "issue_id": record.movement_id,
                    "quantity": amount,
                    "issued_at": moved_at,
                    "batches_consumed": len(allocation.lines),
                    "batch_summary": record.batch_summary,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
        return record

    # =========================================================================
    # Queries
    # =========================================================================

    def get_stats(self, scope: Scope, material_id: int) -> MaterialStats:
        """Received / issued / on-hand figures for one (scope, material)."""
        partition = _partition(scope, material_id)
        with session_scope(self._session_factory) as session:
            batches = BatchSelector(session).for_partition(partition)
            issues = MovementSelector(session).for_partition(partition)
        return build_material_stats(
            scope,
            partition.material_id,
            batches,
            issues,
            material_name=self._directory.material_name(partition.material_id),
        )

    def get_scope_stats(self, scope: Scope) -> list[MaterialStats]:
        """Statistics for every material with movements in ``scope``, by material id."""
        project_id_of(scope)
        with session_scope(self._session_factory) as session:
            batches = BatchSelector(session).for_scope(scope)
            issues = MovementSelector(session).for_scope(scope)
        material_ids = sorted({b.material_id for b in batches} | {i.material_id for i in issues})
        return [
            build_material_stats(
                scope,
                material_id,
                batches,
                issues,
                material_name=self._directory.material_name(material_id),
            )
            for material_id in material_ids
        ]

    def get_history(self, scope: Scope | None = None, limit: int | None = None) -> list[MovementRecord]:
        """
        Receipts and issues merged, newest first.

        Args:
            scope: Restrict to one scope; None means every scope.
            limit: Keep only the N most recent; None keeps everything.

        Equal timestamps list issues before receipts, then higher id first.
        """
        if scope is not None:
            project_id_of(scope)
        with session_scope(self._session_factory) as session:
            batches = BatchSelector(session).for_scope(scope)
            issues = MovementSelector(session).for_scope(scope)
        return merge_history(batches, issues, self._directory, limit)

    def get_recent_activity(self, scope: Scope | None = None, limit: int | None = None) -> list[MovementRecord]:
        """History capped at ``default_history_limit`` unless a limit is given."""
        return self.get_history(scope, limit if limit is not None else self._config.default_history_limit)

    def get_movement_report(self, scope: Scope | None = None) -> MovementReport:
        """Full history for the selection plus total in / out quantities."""
        return build_movement_report(scope, self.get_history(scope))

    def get_material_detail(self, scope: Scope, material_id: int) -> MaterialDetail:
        """Stats, receipts (oldest first), issues (newest first) and merged history."""
        partition = _partition(scope, material_id)
        with session_scope(self._session_factory) as session:
            batches = BatchSelector(session).for_partition(partition)
            issues = MovementSelector(session).for_partition(partition)
        return build_material_detail(scope, partition.material_id, batches, issues, self._directory)

    def get_available_batches(self, scope: Scope, material_id: int) -> list[BatchSnapshot]:
        """Batches with stock left, in the order the next issue will consume them."""
        partition = _partition(scope, material_id)
        with session_scope(self._session_factory) as session:
            return BatchSelector(session).available(partition)

    def get_analytics(self) -> InventoryAnalytics:
        """System-wide totals and the per-scope, per-material consumption breakdown."""
        with session_scope(self._session_factory) as session:
            batches = BatchSelector(session).for_scope(None)
            issues = MovementSelector(session).for_scope(None)
        return build_analytics(batches=batches, issues=issues, directory=self._directory)

    def reconcile(self, scope: Scope, material_id: int) -> ReconciliationResult:
        """Check one partition's conservation rules against committed rows."""
        partition = _partition(scope, material_id)
        with session_scope(self._session_factory) as session:
            batches = BatchSelector(session).for_partition(partition)
            issues = MovementSelector(session).for_partition(partition)
        result = reconcile_partition(scope, partition.material_id, batches, issues)
        if not result.is_consistent:
            logger.error(
                "reconciliation_discrepancy",
                extra={
                    "partition": partition.key,
                    "discrepancies": list(result.discrepancies),
                },
            )
        return result

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _normalize_receipt_details(details: ReceiptDetails) -> ReceiptDetails:
        return replace(
            details,
            weight=normalize_weight(details.weight),
            units_count=normalize_units(details.units_count),
            invoice_quantity=normalize_weight(details.invoice_quantity, "invoice_quantity"),
        )

    @staticmethod
    def _normalize_issue_details(details: IssueDetails) -> IssueDetails:
        return replace(
            details,
            weight=normalize_weight(details.weight),
            units_count=normalize_units(details.units_count),
        )
