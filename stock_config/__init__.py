"""
stock_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Settings are layered: packaged
    ``defaults.yaml``, then an optional YAML file, then explicit overrides.

Architecture position:
    Configuration.  Sits beside ``stock_kernel``; the kernel never imports
    from this package.  ``stock_services`` reads the resulting LedgerConfig.

Failure modes:
    - ``FileNotFoundError`` -- the given YAML file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ValueError`` -- unknown keys or a setting fails validation.

Audit relevance:
    Every successful call logs ``ledger_config_loaded`` with the checksum
    of the effective settings (database password masked).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from stock_config.loader import compute_checksum, load_config_file, load_defaults
from stock_config.schema import LedgerConfig
from stock_kernel.logging_config import get_logger

_logger = get_logger("config")


def get_active_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> LedgerConfig:
    """
    The ONLY public configuration entrypoint.

    Args:
        path: Optional YAML file layered over the packaged defaults.
        overrides: Explicit values applied last (tests, CLI flags).

    Returns:
        Validated, frozen LedgerConfig.
    """
    settings = load_defaults()
    sources = ["defaults"]
    if path is not None:
        settings.update(load_config_file(path))
        sources.append(str(path))
    if overrides:
        settings.update(overrides)
        sources.append("overrides")

    config = LedgerConfig.from_dict(settings)

    _logger.info(
        "ledger_config_loaded",
        extra={
            "sources": sources,
            "checksum": compute_checksum(config.to_dict()),
            "settings": config.redacted(),
        },
    )
    return config


__all__ = [
    "LedgerConfig",
    "get_active_config",
    "load_config_file",
]
