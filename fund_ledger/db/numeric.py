"""Exact decimal column type shared by ledger reads and writes."""

from __future__ import annotations

import decimal
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

_DB_SUM_PRECISION = 80


class DbExactDecimal(TypeDecorator):
    """Decimal type that keeps every fractional digit of the bound value.

    Backends with a native unconstrained NUMERIC store the value as-is. SQLite
    has no exact decimal storage, so the value's text form is stored instead.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String())
        return dialect.type_descriptor(Numeric(asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, float):
            raise TypeError("ledger values must not be binary floats")
        value = Decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, Decimal):
            return value
        return Decimal(str(value))


def db_sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """Add ledger values without rounding.

    Args:
        values: Exact decimal column values.

    Returns:
        Decimal: Sum of the values; zero when there are none.
    """

    with decimal.localcontext() as context:
        context.prec = _DB_SUM_PRECISION
        context.traps[decimal.Inexact] = True
        total = Decimal("0")
        for value in values:
            total += value
        return total
