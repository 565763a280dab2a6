"""FIFO allocation engine."""

from stock_engines.allocation.fifo import allocate_fifo, fifo_order

__all__ = [
    "allocate_fifo",
    "fifo_order",
]
