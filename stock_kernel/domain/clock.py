"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock so that ledger code never calls
    ``datetime.now()`` directly, and resolves caller-supplied movement times
    (absent, date-only, naive, or aware) into UTC timestamps.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, time, timedelta, tzinfo


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current time receive a Clock instance via
        constructor injection.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...


class SystemClock(Clock):
    """Production clock that returns actual system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    ``now()`` returns the same value on repeated calls until ``advance()``
    or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
        self._advance_seconds = 0

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def set_time(self, value: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = value
        self._advance_seconds = 0

    def advance(self, seconds: int = 1) -> None:
        """Advance the clock by the given number of seconds."""
        self._advance_seconds += seconds

    def tick(self) -> datetime:
        """Advance by 1 second and return new time."""
        self.advance(1)
        return self.now()


def resolve_movement_time(
    value: datetime | date | None,
    clock: Clock,
    default_tz: tzinfo = UTC,
) -> datetime:
    """
    Turn a caller-supplied movement time into an aware UTC datetime.

    - ``None``      -> ``clock.now()``
    - ``date``      -> start of that day in ``default_tz``
    - naive ``datetime`` -> interpreted in ``default_tz``
    - aware ``datetime`` -> converted to UTC
    """
    if value is None:
        resolved = clock.now()
    elif isinstance(value, datetime):
        resolved = value if value.tzinfo is not None else value.replace(tzinfo=default_tz)
    elif isinstance(value, date):
        resolved = datetime.combine(value, time.min, tzinfo=default_tz)
    else:
        raise TypeError(f"Movement time must be a date or datetime, got {type(value).__name__}")
    return resolved.astimezone(UTC)
