"""Shared fixtures for ledger tests backed by a temporary SQLite store."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import Engine, create_engine, text

from fund_ledger.db import SQLAlchemyReferenceDataService
from fund_ledger.logging import setup_logging

# The nav table omits the (isin, nav_date) unique constraint so that tests can
# stage the duplicate rows an upstream loader might leave behind. Ledger values
# are TEXT columns, matching how the exact decimal type stores them on SQLite.
_TEST_LEDGER_SCHEMA = (
    "CREATE TABLE customer (customer_id TEXT PRIMARY KEY)",
    "CREATE TABLE nav (isin TEXT NOT NULL, nav_date DATE NOT NULL, nav_value TEXT NOT NULL)",
    "CREATE TABLE cash_transaction ("
    "cash_transaction_id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "customer_id TEXT NOT NULL, value_date DATE NOT NULL, amount TEXT NOT NULL)",
    "CREATE TABLE unit_transaction ("
    "unit_transaction_id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "customer_id TEXT NOT NULL, isin TEXT NOT NULL, value_date DATE NOT NULL, units TEXT NOT NULL)",
)


@pytest.fixture(scope="session", autouse=True)
def _configure_logging() -> None:
    """Route structlog through stdlib logging on stderr for the whole run."""

    setup_logging(log_level="WARNING", log_format="console")


@pytest.fixture
def ledger_engine(tmp_path) -> Iterator[Engine]:
    """Create a file-backed SQLite ledger with empty tables.

    Args:
        tmp_path: Pytest temporary directory.

    Yields:
        Engine: Engine bound to the temporary ledger.
    """

    engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    with engine.begin() as connection:
        for statement in _TEST_LEDGER_SCHEMA:
            connection.execute(text(statement))
    yield engine
    engine.dispose()


@pytest.fixture
def reference_data(ledger_engine: Engine) -> SQLAlchemyReferenceDataService:
    """Return reference data writer bound to the temporary ledger."""

    return SQLAlchemyReferenceDataService(engine=ledger_engine)
