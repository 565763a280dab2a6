"""Kernel write services."""

from stock_kernel.services.base import BaseService
from stock_kernel.services.partition_lock import PartitionLocks, default_partition_locks
from stock_kernel.services.stock_writer import StockWriter

__all__ = [
    "BaseService",
    "PartitionLocks",
    "default_partition_locks",
    "StockWriter",
]
