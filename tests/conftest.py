"""
Pytest fixtures for the stock ledger test suite.

Provides:
- A fresh in-memory SQLite database per test (tables created from the models)
- File-backed SQLite databases for multi-threaded tests
- Optional PostgreSQL engine when STOCK_LEDGER_TEST_DATABASE_URL is set
- Deterministic clock, name resolver and a ready-to-use InventoryLedger
- Structured log capture
"""

import json
import logging
import os
from io import StringIO

import pytest

from stock_config.schema import LedgerConfig
from stock_engines.reporting.directory import MappingNameResolver
from stock_kernel.db.engine import build_engine, build_session_factory, create_tables, drop_tables
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from stock_kernel.services.partition_lock import PartitionLocks
from stock_services.inventory_ledger import InventoryLedger
from tests.helpers import CEMENT, STEEL, T0

PG_URL_ENV = "STOCK_LEDGER_TEST_DATABASE_URL"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.record_receipt(...)
            logs = captured_logs()
            assert any(r["message"] == "receipt_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "postgres: mark test as requiring PostgreSQL")
    config.addinivalue_line("markers", "slow_locks: mark test as potentially waiting for locks")


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with all ledger tables."""
    eng = build_engine("sqlite://")
    create_tables(eng)
    yield eng
    drop_tables(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def session(session_factory):
    """A bare session for selector/writer tests.  Rolled back at teardown."""
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite engine, shareable across threads."""
    eng = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def postgres_engine():
    """PostgreSQL engine, or skip when no test database is configured."""
    url = os.environ.get(PG_URL_ENV)
    if not url:
        pytest.skip(f"{PG_URL_ENV} not set")
    eng = build_engine(url, pool_size=20, max_overflow=10)
    drop_tables(eng)
    create_tables(eng)
    yield eng
    drop_tables(eng)
    eng.dispose()


# =============================================================================
# Ledger fixtures
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(T0)


@pytest.fixture
def names():
    return MappingNameResolver(
        projects={1: "Bridge", 2: "Tunnel"},
        materials={CEMENT: "Cement", STEEL: "Steel"},
    )


@pytest.fixture
def ledger_config():
    return LedgerConfig(database_url="sqlite://", lock_timeout_seconds=2.0)


@pytest.fixture
def make_ledger(clock, names, ledger_config):
    """Factory for ledgers over an arbitrary session factory."""

    def _make(factory, *, config=None, locks=None, resolver=None) -> InventoryLedger:
        return InventoryLedger(
            factory,
            config=config or ledger_config,
            clock=clock,
            names=resolver or names,
            locks=locks or PartitionLocks(),
        )

    return _make


@pytest.fixture
def ledger(make_ledger, session_factory):
    """InventoryLedger over the per-test in-memory database."""
    return make_ledger(session_factory)
