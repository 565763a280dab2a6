"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Reads YAML configuration files into plain mappings and computes a checksum
of the effective settings.  Callers outside this package use
``stock_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* A document that is not a mapping (or lacks the ``ledger`` section when
  one is expected)  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_config_file(path: str | Path) -> dict[str, Any]:
    """
    Load one YAML file and return its ``ledger`` section.

    A file may hold the settings at top level or under a ``ledger:`` key.
    An empty file yields an empty mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    section = data.get("ledger", data)
    if not isinstance(section, dict):
        raise ValueError(f"{path}: 'ledger' must be a mapping")
    return dict(section)


def load_defaults() -> dict[str, Any]:
    return load_config_file(DEFAULTS_PATH)


def compute_checksum(settings: dict[str, Any]) -> str:
    """Deterministic SHA-256 over the settings (sorted keys)."""
    canonical = json.dumps(settings, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
