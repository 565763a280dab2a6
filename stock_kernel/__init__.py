"""
Stock Kernel

Persistence, domain values and write services for a FIFO stock ledger:
- Batches with exact remaining balances
- Issues allocated oldest-first, written atomically with their consumptions
- Project and general-store partitions
- Fixed-point quantities with explicit half-up rounding
"""

__version__ = "0.1.0"
