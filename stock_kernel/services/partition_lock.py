"""
PartitionLocks -- in-process serialization of issues per (scope, material).

Responsibility:
    Hands out one lock per partition key so that two issues against the same
    (scope, material) never read the same balance snapshot.  The lock is held
    across the whole unit of work, commit included.

Architecture position:
    Kernel > Services.  Used only by InventoryLedger.record_issue.

Invariants enforced:
    - Acquisition is bounded: ``hold()`` waits at most ``timeout`` seconds and
      then raises AllocationConflictError (retryable).  Nothing blocks forever.
    - Different partitions never contend.
    - Across processes the row locks taken by BatchSelector.lock_eligible
      (SELECT ... FOR UPDATE on PostgreSQL) provide the same guarantee.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

from stock_kernel.domain.scope import Partition
from stock_kernel.exceptions import AllocationConflictError
from stock_kernel.logging_config import get_logger

logger = get_logger("services.partition_lock")


class PartitionLocks:
    """
    Registry of per-partition locks.  Share one instance per process.

    Locks are created on first use and never evicted, so the registry holds
    one threading.Lock per (scope, material) ever issued against.  That is
    bounded by the project x material catalogue, not by traffic.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @property
    def partition_count(self) -> int:
        """Number of partitions a lock has been created for."""
        with self._guard:
            return len(self._locks)

    def is_held(self, partition: Partition) -> bool:
        return self._lock_for(partition.key).locked()

    @contextmanager
    def hold(self, partition: Partition, timeout: float) -> Iterator[None]:
        """
        Hold the partition lock for the duration of the block.

        Raises:
            AllocationConflictError: lock not acquired within ``timeout``.
        """
        lock = self._lock_for(partition.key)
        t0 = time.monotonic()
        if not lock.acquire(timeout=timeout):
            logger.warning(
                "partition_lock_timeout",
                extra={"partition": partition.key, "timeout_seconds": timeout},
            )
            raise AllocationConflictError(partition.key, timeout)
        waited_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.debug(
            "partition_lock_acquired",
            extra={"partition": partition.key, "waited_ms": waited_ms},
        )
        try:
            yield
        finally:
            lock.release()


# Process-wide registry used when a ledger is built without its own.
default_partition_locks = PartitionLocks()
