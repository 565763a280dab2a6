"""
MovementSelector -- read access to the movement store (issues + consumptions).

Issues come back as IssueSnapshot with their consumptions in allocation order
and the label of every batch drawn from, which is all the history views need
to render a batch summary.
"""

from __future__ import annotations

from sqlalchemy import select

from stock_kernel.domain.movements import ConsumptionLine, IssueDetails, IssueSnapshot
from stock_kernel.domain.scope import Partition, Scope, scope_for_project
from stock_kernel.models.issue import IssueModel
from stock_kernel.selectors.base import BaseSelector, scope_clause


def issue_to_snapshot(issue: IssueModel) -> IssueSnapshot:
    """Freeze an ORM issue and its consumptions into an IssueSnapshot."""
    lines = tuple(
        ConsumptionLine(
            batch_id=consumption.batch_id,
            amount=consumption.amount,
            batch_label=consumption.batch.batch_label if consumption.batch is not None else None,
        )
        for consumption in sorted(issue.consumptions, key=lambda c: c.sequence)
    )
    return IssueSnapshot(
        issue_id=issue.id,
        scope=scope_for_project(issue.project_id),
        material_id=issue.material_id,
        quantity=issue.quantity,
        issued_at=issue.issued_at,
        details=IssueDetails(
            recipient=issue.recipient,
            recipient_designation=issue.recipient_designation,
            store_incharge=issue.store_incharge,
            weight=issue.weight,
            units_count=issue.units_count,
            remarks=issue.remarks,
        ),
        consumptions=lines,
    )


class MovementSelector(BaseSelector[IssueModel]):
    """Queries over stock_issues and stock_consumptions."""

    def for_partition(self, partition: Partition) -> list[IssueSnapshot]:
        """Issues for one (scope, material), oldest first."""
        stmt = (
            select(IssueModel)
            .where(
                scope_clause(IssueModel.project_id, partition.scope),
                IssueModel.material_id == partition.material_id,
            )
            .order_by(IssueModel.issued_at.asc(), IssueModel.id.asc())
        )
        return [issue_to_snapshot(row) for row in self.session.scalars(stmt).all()]

    def for_scope(self, scope: Scope | None = None) -> list[IssueSnapshot]:
        """Issues in a scope (every scope when None), oldest first."""
        stmt = select(IssueModel)
        if scope is not None:
            stmt = stmt.where(scope_clause(IssueModel.project_id, scope))
        stmt = stmt.order_by(IssueModel.issued_at.asc(), IssueModel.id.asc())
        return [issue_to_snapshot(row) for row in self.session.scalars(stmt).all()]
