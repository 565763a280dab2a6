"""Shared constants and small helpers for the ledger tests."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from stock_kernel.domain.scope import GENERAL_STORE, ProjectScope

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=UTC)

BRIDGE = ProjectScope(1)
TUNNEL = ProjectScope(2)
GENERAL = GENERAL_STORE

CEMENT = 10
STEEL = 11


def at(hours: float = 0, minutes: float = 0) -> datetime:
    """T0 plus an offset."""
    return T0 + timedelta(hours=hours, minutes=minutes)


def D(value: str) -> Decimal:
    return Decimal(value)
