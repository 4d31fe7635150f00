"""Typed interfaces for database-layer services.

All SQL and SQLAlchemy access must remain in the db package and its submodules.
"""

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Protocol

from fund_ledger.domain import HealthStatus


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class LedgerGatewayPort(Protocol):
    """Read/write contract over the ledger store, free of business rules.

    Every read and write runs inside the scope opened by `db_begin` and observes
    the scope's own pending writes. Store failures surface as `StoreFailureError`.
    """

    def db_begin(self) -> None:
        """Open a transaction scope.

        Raises:
            RuntimeError: Raised when a scope is already open.
            StoreFailureError: Raised when the store cannot open a transaction.
        """

    def db_commit(self) -> None:
        """Commit and close the open scope.

        Raises:
            RuntimeError: Raised when no scope is open.
            StoreFailureError: Raised when the commit fails; nothing is durable.
        """

    def db_rollback(self) -> None:
        """Discard every pending write and close the open scope.

        Raises:
            StoreFailureError: Raised when the store reports a rollback failure.
        """

    def db_transaction_scope(self) -> AbstractContextManager[None]:
        """Return a context manager that commits on success and rolls back on error.

        Returns:
            AbstractContextManager[None]: Scope context manager.
        """

    def db_customer_exists(self, customer_id: str) -> bool:
        """Return whether a customer row exists.

        Args:
            customer_id: Opaque customer identifier.

        Returns:
            bool: True iff a customer row is found.
        """

    def db_cash_balance(self, customer_id: str, as_of: date | None = None) -> Decimal:
        """Sum the customer's cash transactions.

        Args:
            customer_id: Opaque customer identifier.
            as_of: Optional inclusive value-date bound; all rows when None.

        Returns:
            Decimal: Cash balance, zero when there are no rows.
        """

    def db_unit_holding(self, customer_id: str, isin: str, as_of: date | None = None) -> Decimal:
        """Sum the customer's unit transactions in one fund.

        Args:
            customer_id: Opaque customer identifier.
            isin: Fund identifier.
            as_of: Optional inclusive value-date bound; all rows when None.

        Returns:
            Decimal: Unit holding, zero when there are no rows.
        """

    def db_nav_values(self, isin: str, nav_date: date) -> list[Decimal]:
        """Return every NAV value stored for one fund and date.

        Args:
            isin: Fund identifier.
            nav_date: NAV publication date.

        Returns:
            list[Decimal]: Matching NAV values; uniqueness is not enforced here.
        """

    def db_append_cash(self, customer_id: str, value_date: date, amount: Decimal) -> None:
        """Insert one cash transaction row.

        Args:
            customer_id: Opaque customer identifier.
            value_date: Settlement date.
            amount: Signed amount; negative debits the customer.
        """

    def db_append_units(self, customer_id: str, isin: str, value_date: date, units: Decimal) -> None:
        """Insert one unit transaction row.

        Args:
            customer_id: Opaque customer identifier.
            isin: Fund identifier.
            value_date: Settlement date.
            units: Signed units; negative disposes units.
        """
