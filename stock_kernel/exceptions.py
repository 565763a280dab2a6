"""
Typed Exception Hierarchy for the Stock Ledger.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The orchestration layer in front of the ledger (API controllers) must map
every failure to a user-facing response without parsing message strings.
Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        ledger.record_issue(scope, material_id, "120")
    except Exception as e:
        if "Insufficient" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        ledger.record_issue(scope, material_id, "120")
    except InsufficientStockError as e:
        return {"error": e.code, "available": str(e.available)}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockLedgerError (base)
    |
    +-- QuantityError
    |   +-- InvalidQuantityError
    |
    +-- StockError
    |   +-- InsufficientStockError
    |
    +-- ConsistencyError
    |   +-- InternalConsistencyError
    |
    +-- ConcurrencyError
        +-- AllocationConflictError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                   | When Raised
-------------|------------------------|--------------------------------------------
Quantity     | INVALID_QUANTITY       | Zero, negative, NaN or infinite amount
-------------|------------------------|--------------------------------------------
Stock        | INSUFFICIENT_STOCK     | Requested issue exceeds batch balances
-------------|------------------------|--------------------------------------------
Consistency  | INTERNAL_CONSISTENCY   | Allocation walk disagrees with the
             |                        | availability check (fatal)
-------------|------------------------|--------------------------------------------
Concurrency  | ALLOCATION_CONFLICT    | Partition lock not acquired in time
             |                        | (retryable)

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Caller errors (InvalidQuantityError, InsufficientStockError) are always
   reported and never retried automatically. InsufficientStockError carries
   ``available`` so the caller can adjust the request.

2. InternalConsistencyError means the ledger aborted its own transaction.
   Surface it as an unexpected failure; never swallow it.

3. AllocationConflictError is the only retryable error. The ledger itself
   never retries.
"""

from decimal import Decimal
from typing import Any


class StockLedgerError(Exception):
    """
    Base exception for all stock ledger errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_LEDGER_ERROR"
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Structured payload for the orchestration layer."""
        payload: dict[str, Any] = {"code": self.code, "message": str(self)}
        for key, value in vars(self).items():
            if key.startswith("_"):
                continue
            payload[key] = str(value) if isinstance(value, Decimal) else value
        return payload


# Quantity-related exceptions


class QuantityError(StockLedgerError):
    """Base exception for quantity validation errors."""

    code: str = "QUANTITY_ERROR"


class InvalidQuantityError(QuantityError):
    """Quantity is non-positive, NaN, infinite, or not a number at all."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, value: Any, field: str = "quantity", reason: str | None = None):
        self.field = field
        self.value = str(value)
        self.reason = reason or "must be a finite number greater than zero"
        super().__init__(f"Invalid {field} {self.value!r}: {self.reason}")


# Stock availability exceptions


class StockError(StockLedgerError):
    """Base exception for stock availability errors."""

    code: str = "STOCK_ERROR"


class InsufficientStockError(StockError):
    """
    Requested issue exceeds the summed remaining balance of eligible batches.

    Raised before any batch is touched; nothing is written.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        scope: str,
        material_id: int,
        requested: Decimal,
        available: Decimal,
    ):
        self.scope = scope
        self.material_id = material_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for material {material_id} in {scope}. "
            f"Available {available:.3f}, requested {requested:.3f}"
        )


# Consistency exceptions


class ConsistencyError(StockLedgerError):
    """Base exception for internal consistency failures."""

    code: str = "CONSISTENCY_ERROR"


class InternalConsistencyError(ConsistencyError):
    """
    The allocation walk left a non-zero residual.

    This can only happen if the availability check and the allocation walk
    saw different batch sets. The enclosing transaction is rolled back.
    """

    code: str = "INTERNAL_CONSISTENCY"

    def __init__(self, scope: str, material_id: int, residual: Decimal, detail: str | None = None):
        self.scope = scope
        self.material_id = material_id
        self.residual = residual
        self.detail = detail
        message = (
            f"FIFO allocation left residual {residual} for material "
            f"{material_id} in {scope}"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# Concurrency exceptions


class ConcurrencyError(StockLedgerError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class AllocationConflictError(ConcurrencyError):
    """Another issue holds the partition lock longer than the configured timeout."""

    code: str = "ALLOCATION_CONFLICT"
    retryable: bool = True

    def __init__(self, partition: str, timeout_seconds: float):
        self.partition = partition
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Could not lock partition {partition} within {timeout_seconds}s; "
            "another issue is being allocated, retry the request"
        )
