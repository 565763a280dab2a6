"""
Ledger configuration schema.

``LedgerConfig`` is a frozen, validated dataclass.  It is built by
``stock_config.get_active_config()`` from the packaged defaults, an optional
YAML file, and explicit overrides; nothing else in the ledger reads
configuration files.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from datetime import UTC, tzinfo
from typing import Any, Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def resolve_timezone(name: str) -> tzinfo:
    """Zone for a configured name; "UTC" needs no tz database."""
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown default_timezone '{name}'") from exc


@dataclass(frozen=True)
class LedgerConfig:
    """
    Runtime settings for the stock ledger.

    Field defaults match ``defaults.yaml``:

        config = LedgerConfig(database_url="postgresql://ledger@db/stock")
    """

    # Persistence
    database_url: str = "sqlite:///stock_ledger.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10

    # Issue serialization
    lock_timeout_seconds: float = 10.0

    # Date-only movement times are taken as midnight in this zone
    default_timezone: str = "UTC"

    # Reporting
    default_history_limit: int = 12
    general_store_project_id: int = 0
    general_store_label: str = "General Store"

    log_level: str = "INFO"

    def __post_init__(self):
        if not self.database_url:
            raise ValueError("database_url is required")
        if self.pool_size <= 0:
            raise ValueError("pool_size must be positive")
        if self.max_overflow < 0:
            raise ValueError("max_overflow cannot be negative")
        if self.lock_timeout_seconds <= 0:
            raise ValueError("lock_timeout_seconds must be positive")
        if self.default_history_limit <= 0:
            raise ValueError("default_history_limit must be positive")
        if self.general_store_project_id < 0:
            raise ValueError("general_store_project_id cannot be negative")
        if not self.general_store_label:
            raise ValueError("general_store_label cannot be empty")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got '{self.log_level}'"
            )
        resolve_timezone(self.default_timezone)

    @property
    def timezone(self) -> tzinfo:
        return resolve_timezone(self.default_timezone)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Build from a mapping, rejecting keys the schema does not know.

        Raises:
            ValueError: unknown keys or failed validation.
        """
        unknown = set(data) - cls.field_names()
        if unknown:
            raise ValueError(f"Unknown ledger configuration keys: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def redacted(self) -> dict[str, Any]:
        """to_dict() with the database password masked, for logs."""
        from sqlalchemy.engine.url import make_url

        data = self.to_dict()
        data["database_url"] = make_url(self.database_url).render_as_string(hide_password=True)
        return data
