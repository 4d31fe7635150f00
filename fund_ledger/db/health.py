"""Ledger store health probe: connectivity plus presence of the migrated tables."""

from sqlalchemy import Engine, inspect
from sqlalchemy.exc import SQLAlchemyError

from fund_ledger.domain import HealthStatus

from .interfaces import DatabaseHealthPort

DB_LEDGER_TABLE_NAMES = ("customer", "nav", "cash_transaction", "unit_transaction")


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Report whether the ledger store is reachable and migrated.

    A reachable store without the ledger tables is `degraded` rather than `down`.
    """

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the ledger store URL with the password masked.

        Returns:
            str: Rendered engine URL string.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Inspect the store for the ledger tables.

        Returns:
            HealthStatus: `ok` when every ledger table exists, `degraded` with the
                missing table names otherwise.

        Raises:
            ConnectionError: Raised when the store cannot be reached.
        """

        try:
            with self._engine.connect() as connection:
                present_tables = set(inspect(connection).get_table_names())
        except SQLAlchemyError as error:
            raise ConnectionError("ledger store is unreachable") from error

        missing_tables = [name for name in DB_LEDGER_TABLE_NAMES if name not in present_tables]
        if missing_tables:
            return HealthStatus(status="degraded", detail=f"missing ledger tables: {', '.join(missing_tables)}")
        return HealthStatus(status="ok", detail=f"{len(DB_LEDGER_TABLE_NAMES)} ledger tables present")
