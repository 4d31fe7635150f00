"""Database service for upstream reference data (customers and NAV rows).

Trade batches only read this data. The service exists for upstream loaders and
for preparing ledger state in tooling; it never touches the transaction tables.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Engine, String, bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from fund_ledger.domain import StoreFailureError

from .numeric import DbExactDecimal

_DB_INSERT_CUSTOMER_SQL = text("INSERT INTO customer (customer_id) VALUES (:customer_id)").bindparams(
    bindparam("customer_id", type_=String())
)

_DB_INSERT_NAV_SQL = text(
    "INSERT INTO nav (isin, nav_date, nav_value) VALUES (:isin, :nav_date, :nav_value)"
).bindparams(
    bindparam("isin", type_=String()),
    bindparam("nav_date", type_=Date()),
    bindparam("nav_value", type_=DbExactDecimal()),
)


class SQLAlchemyReferenceDataService:
    """Engine-backed writer for customer and NAV reference rows."""

    def __init__(self, engine: Engine):
        """Initialize reference data service.

        Args:
            engine: SQLAlchemy engine used for reference data writes.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_customers_insert(self, customer_ids: list[str]) -> int:
        """Insert customer rows in one transaction.

        Args:
            customer_ids: Opaque customer identifiers.

        Returns:
            int: Number of inserted rows.

        Raises:
            ValueError: Raised when an identifier is blank.
            StoreFailureError: Raised when the insert fails.
        """

        normalized_ids = [self._db_validate_non_empty_text(value, "customer_id") for value in customer_ids]
        try:
            with self._engine.begin() as connection:
                for customer_id in normalized_ids:
                    connection.execute(_DB_INSERT_CUSTOMER_SQL, {"customer_id": customer_id})
        except SQLAlchemyError as error:
            raise StoreFailureError("failed to insert customers", cause=error) from error
        return len(normalized_ids)

    def db_navs_insert(self, nav_rows: list[tuple[str, date, Decimal]]) -> int:
        """Insert NAV rows in one transaction.

        Args:
            nav_rows: `(isin, nav_date, nav_value)` tuples.

        Returns:
            int: Number of inserted rows.

        Raises:
            ValueError: Raised when an ISIN is blank or a NAV value is negative.
            StoreFailureError: Raised when the insert fails, e.g. on a duplicate `(isin, nav_date)`.
        """

        parameters = []
        for isin, nav_date, nav_value in nav_rows:
            if nav_value < 0:
                raise ValueError("nav_value must not be negative")
            parameters.append(
                {
                    "isin": self._db_validate_non_empty_text(isin, "isin"),
                    "nav_date": nav_date,
                    "nav_value": nav_value,
                }
            )

        try:
            with self._engine.begin() as connection:
                for row_parameters in parameters:
                    connection.execute(_DB_INSERT_NAV_SQL, row_parameters)
        except SQLAlchemyError as error:
            raise StoreFailureError("failed to insert nav rows", cause=error) from error
        return len(parameters)

    def _db_validate_non_empty_text(self, value: str, field_name: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError(f"{field_name} must not be blank")
        return stripped_value
