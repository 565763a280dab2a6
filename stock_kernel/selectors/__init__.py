"""Read-only selectors for the batch and movement stores."""

from stock_kernel.selectors.base import BaseSelector, scope_clause
from stock_kernel.selectors.batch_selector import BatchSelector, batch_to_snapshot
from stock_kernel.selectors.movement_selector import MovementSelector, issue_to_snapshot

__all__ = [
    "BaseSelector",
    "scope_clause",
    "BatchSelector",
    "batch_to_snapshot",
    "MovementSelector",
    "issue_to_snapshot",
]
