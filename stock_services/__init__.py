"""
stock_services -- orchestration over the kernel and the pure engines.

Responsibility:
    ``InventoryLedger`` is the in-process boundary the orchestration layer
    calls.  It is the only layer that opens transactions, takes partition
    locks or reads the clock.

Dependency direction:
    stock_services/ -> stock_engines/, stock_kernel/, stock_config/  (allowed)
    stock_engines/  -> stock_services/                               (FORBIDDEN)
    stock_kernel/   -> stock_services/, stock_config/                (FORBIDDEN)
"""

from stock_services.inventory_ledger import InventoryLedger

__all__ = ["InventoryLedger"]
