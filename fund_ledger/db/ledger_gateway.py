"""Database gateway for ledger reads and append-only transaction writes.

One gateway instance holds at most one open transaction scope. All reads and
writes go through the scope's connection, so reads observe the scope's own
pending writes before commit.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import Connection, Date, Engine, String, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable, TextualSelect

from fund_ledger.domain import StoreFailureError

from .interfaces import LedgerGatewayPort
from .numeric import DbExactDecimal, db_sum_decimals

logger = structlog.get_logger(__name__)

_DB_LEDGER_NUMERIC = DbExactDecimal()

_DB_CUSTOMER_EXISTS_SQL = text(
    "SELECT 1 AS found FROM customer WHERE customer_id = :customer_id LIMIT 1"
).bindparams(bindparam("customer_id", type_=String()))

_DB_AS_OF_FILTER_SQL = " AND value_date <= :as_of"


# rows, not SUM(), so the total is added with db_sum_decimals
def _db_build_cash_amounts_sql(bounded: bool) -> TextualSelect:
    statement_text = "SELECT amount FROM cash_transaction WHERE customer_id = :customer_id"
    parameters = [bindparam("customer_id", type_=String())]
    if bounded:
        statement_text += _DB_AS_OF_FILTER_SQL
        parameters.append(bindparam("as_of", type_=Date()))
    return text(statement_text).bindparams(*parameters).columns(amount=_DB_LEDGER_NUMERIC)


def _db_build_unit_amounts_sql(bounded: bool) -> TextualSelect:
    statement_text = "SELECT units FROM unit_transaction WHERE customer_id = :customer_id AND isin = :isin"
    parameters = [bindparam("customer_id", type_=String()), bindparam("isin", type_=String())]
    if bounded:
        statement_text += _DB_AS_OF_FILTER_SQL
        parameters.append(bindparam("as_of", type_=Date()))
    return text(statement_text).bindparams(*parameters).columns(units=_DB_LEDGER_NUMERIC)


# keyed by whether an `as_of` bound applies
_DB_CASH_AMOUNTS_SQL = {bounded: _db_build_cash_amounts_sql(bounded) for bounded in (False, True)}
_DB_UNIT_AMOUNTS_SQL = {bounded: _db_build_unit_amounts_sql(bounded) for bounded in (False, True)}

_DB_NAV_VALUES_SQL = (
    text("SELECT nav_value FROM nav WHERE isin = :isin AND nav_date = :nav_date")
    .bindparams(bindparam("isin", type_=String()), bindparam("nav_date", type_=Date()))
    .columns(nav_value=_DB_LEDGER_NUMERIC)
)

_DB_APPEND_CASH_SQL = text(
    "INSERT INTO cash_transaction (customer_id, value_date, amount) "
    "VALUES (:customer_id, :value_date, :amount)"
).bindparams(
    bindparam("customer_id", type_=String()),
    bindparam("value_date", type_=Date()),
    bindparam("amount", type_=_DB_LEDGER_NUMERIC),
)

_DB_APPEND_UNITS_SQL = text(
    "INSERT INTO unit_transaction (customer_id, isin, value_date, units) "
    "VALUES (:customer_id, :isin, :value_date, :units)"
).bindparams(
    bindparam("customer_id", type_=String()),
    bindparam("isin", type_=String()),
    bindparam("value_date", type_=Date()),
    bindparam("units", type_=_DB_LEDGER_NUMERIC),
)


class SQLAlchemyLedgerGateway(LedgerGatewayPort):
    """SQLAlchemy-backed ledger gateway.

    This service owns the transaction scope for one batch at a time and wraps
    every SQLAlchemy failure as `StoreFailureError`.
    """

    def __init__(self, engine: Engine):
        """Initialize ledger gateway.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine
        self._connection: Connection | None = None

    def db_scope_is_open(self) -> bool:
        """Return whether a transaction scope is currently open.

        Returns:
            bool: True while between `db_begin` and `db_commit`/`db_rollback`.
        """

        return self._connection is not None

    def db_begin(self) -> None:
        """Open one connection and begin its transaction.

        Raises:
            RuntimeError: Raised when a scope is already open.
            StoreFailureError: Raised when the connection or transaction cannot be opened.
        """

        if self._connection is not None:
            raise RuntimeError("ledger transaction scope already open")

        connection = None
        try:
            connection = self._engine.connect()
            connection.begin()
        except SQLAlchemyError as error:
            if connection is not None:
                connection.close()
            raise StoreFailureError("failed to open ledger transaction scope", cause=error) from error
        self._connection = connection
        logger.debug("ledger_scope_opened")

    def db_commit(self) -> None:
        """Commit the open scope and release its connection.

        Raises:
            RuntimeError: Raised when no scope is open.
            StoreFailureError: Raised when the commit fails.
        """

        connection = self._db_require_connection()
        try:
            connection.commit()
        except SQLAlchemyError as error:
            raise StoreFailureError("failed to commit ledger transaction scope", cause=error) from error
        finally:
            self._db_release_connection()
        logger.debug("ledger_scope_committed")

    def db_rollback(self) -> None:
        """Roll back the open scope, if any, and release its connection.

        Raises:
            StoreFailureError: Raised when the store reports a rollback failure.
        """

        if self._connection is None:
            return
        try:
            self._connection.rollback()
        except SQLAlchemyError as error:
            raise StoreFailureError("failed to roll back ledger transaction scope", cause=error) from error
        finally:
            self._db_release_connection()
        logger.debug("ledger_scope_rolled_back")

    @contextmanager
    def db_transaction_scope(self) -> Iterator[None]:
        """Run the enclosed block inside one scope.

        Yields:
            None: Control returns to the caller inside an open scope.

        Raises:
            StoreFailureError: Raised when begin or commit fails.
        """

        self.db_begin()
        try:
            yield
        except BaseException:
            self.db_rollback()
            raise
        self.db_commit()

    def db_customer_exists(self, customer_id: str) -> bool:
        """Return whether a customer row is found.

        Args:
            customer_id: Opaque customer identifier.

        Returns:
            bool: True iff at least one row matches.

        Raises:
            StoreFailureError: Raised when the read fails.
        """

        row = self._db_execute(
            _DB_CUSTOMER_EXISTS_SQL,
            {"customer_id": customer_id},
            failure_message="failed to check customer existence",
        ).first()
        return row is not None

    def db_cash_balance(self, customer_id: str, as_of: date | None = None) -> Decimal:
        """Sum cash transaction amounts for one customer.

        Args:
            customer_id: Opaque customer identifier.
            as_of: Optional inclusive value-date bound.

        Returns:
            Decimal: Cash balance, zero when there are no rows.

        Raises:
            StoreFailureError: Raised when the read fails.
        """

        amounts = self._db_execute(
            _DB_CASH_AMOUNTS_SQL[as_of is not None],
            {"customer_id": customer_id, "as_of": as_of},
            failure_message="failed to read cash balance",
        ).scalars()
        return db_sum_decimals(amounts)

    def db_unit_holding(self, customer_id: str, isin: str, as_of: date | None = None) -> Decimal:
        """Sum unit transactions for one customer and fund.

        Args:
            customer_id: Opaque customer identifier.
            isin: Fund identifier.
            as_of: Optional inclusive value-date bound.

        Returns:
            Decimal: Unit holding, zero when there are no rows.

        Raises:
            StoreFailureError: Raised when the read fails.
        """

        units = self._db_execute(
            _DB_UNIT_AMOUNTS_SQL[as_of is not None],
            {"customer_id": customer_id, "isin": isin, "as_of": as_of},
            failure_message="failed to read unit holding",
        ).scalars()
        return db_sum_decimals(units)

    def db_nav_values(self, isin: str, nav_date: date) -> list[Decimal]:
        """Return every stored NAV value for one fund and date.

        Args:
            isin: Fund identifier.
            nav_date: NAV publication date.

        Returns:
            list[Decimal]: Matching NAV values in store order.

        Raises:
            StoreFailureError: Raised when the read fails.
        """

        return list(
            self._db_execute(
                _DB_NAV_VALUES_SQL,
                {"isin": isin, "nav_date": nav_date},
                failure_message="failed to read nav values",
            ).scalars()
        )

    def db_append_cash(self, customer_id: str, value_date: date, amount: Decimal) -> None:
        """Insert one cash transaction row.

        Args:
            customer_id: Opaque customer identifier.
            value_date: Settlement date.
            amount: Signed decimal amount.

        Raises:
            StoreFailureError: Raised when the insert fails.
        """

        self._db_execute(
            _DB_APPEND_CASH_SQL,
            {"customer_id": customer_id, "value_date": value_date, "amount": amount},
            failure_message="failed to append cash transaction",
        )

    def db_append_units(self, customer_id: str, isin: str, value_date: date, units: Decimal) -> None:
        """Insert one unit transaction row.

        Args:
            customer_id: Opaque customer identifier.
            isin: Fund identifier.
            value_date: Settlement date.
            units: Signed decimal units.

        Raises:
            StoreFailureError: Raised when the insert fails.
        """

        self._db_execute(
            _DB_APPEND_UNITS_SQL,
            {"customer_id": customer_id, "isin": isin, "value_date": value_date, "units": units},
            failure_message="failed to append unit transaction",
        )

    def _db_execute(self, statement: Executable, parameters: dict[str, Any], failure_message: str):
        connection = self._db_require_connection()
        try:
            return connection.execute(statement, parameters)
        except SQLAlchemyError as error:
            raise StoreFailureError(failure_message, cause=error) from error

    def _db_require_connection(self) -> Connection:
        if self._connection is None:
            raise RuntimeError("no ledger transaction scope is open")
        return self._connection

    def _db_release_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            connection.close()
