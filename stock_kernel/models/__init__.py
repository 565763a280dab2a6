"""ORM models for the stock ledger."""

from stock_kernel.models.batch import BatchModel
from stock_kernel.models.issue import ConsumptionModel, IssueModel

__all__ = [
    "BatchModel",
    "IssueModel",
    "ConsumptionModel",
]
