"""Closed error taxonomy for trade batch application.

Every failure that aborts a batch is one of the classes below. Each carries the
contextual fields needed for a user-visible failure message.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal


class LedgerBatchError(Exception):
    """Base exception for all batch-aborting failures.

    Attributes:
        error_kind: Stable error kind label used in user-facing messages.
        context: Contextual fields for diagnostics, in display order.
    """

    error_kind = "LedgerBatchError"

    def __init__(self, message: str, **context: object):
        super().__init__(message)
        self.context: dict[str, object] = dict(context)

    def error_context_text(self) -> str:
        """Render context fields as `key=value` pairs.

        Returns:
            str: Space-separated context fields.
        """

        return " ".join(f"{key}={value}" for key, value in self.context.items())


class MalformedRecordError(LedgerBatchError):
    """Batch file line that cannot be parsed into an instruction."""

    error_kind = "MalformedRecord"

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"malformed record at line {line_number}: {reason}", line_number=line_number, reason=reason)
        self.line_number = line_number
        self.reason = reason


class UnknownCustomerError(LedgerBatchError):
    """Instruction references a customer that does not exist."""

    error_kind = "UnknownCustomer"

    def __init__(self, customer_id: str):
        super().__init__(f"no customer found with id: {customer_id}", customer_id=customer_id)
        self.customer_id = customer_id


class NavMissingError(LedgerBatchError):
    """No NAV row exists for the fund and value date."""

    error_kind = "NavMissing"

    def __init__(self, isin: str, value_date: date):
        super().__init__(
            f"no nav found for isin: {isin} on date: {value_date.isoformat()}",
            isin=isin,
            value_date=value_date.isoformat(),
        )
        self.isin = isin
        self.value_date = value_date


class NavAmbiguousError(LedgerBatchError):
    """More than one NAV row exists for the fund and value date."""

    error_kind = "NavAmbiguous"

    def __init__(self, isin: str, value_date: date):
        super().__init__(
            f"found multiple navs for isin: {isin} on date: {value_date.isoformat()}",
            isin=isin,
            value_date=value_date.isoformat(),
        )
        self.isin = isin
        self.value_date = value_date


class InvalidPriceError(LedgerBatchError):
    """Resolved NAV cannot be used for pricing."""

    error_kind = "InvalidPrice"

    def __init__(self, isin: str, value_date: date, price: Decimal):
        super().__init__(
            f"invalid nav {price} for isin: {isin} on date: {value_date.isoformat()}",
            isin=isin,
            value_date=value_date.isoformat(),
            price=price,
        )
        self.isin = isin
        self.value_date = value_date
        self.price = price


class InsufficientCashError(LedgerBatchError):
    """BUY would drive the customer's cash balance below zero."""

    error_kind = "InsufficientCash"

    def __init__(self, customer_id: str, requested: Decimal, available: Decimal):
        super().__init__(
            f"customer {customer_id} wanted to buy for {requested} but only has {available} available in cash",
            customer_id=customer_id,
            requested=requested,
            available=available,
        )
        self.customer_id = customer_id
        self.requested = requested
        self.available = available


class InsufficientUnitsError(LedgerBatchError):
    """SELL would drive the customer's fund holding below zero."""

    error_kind = "InsufficientUnits"

    def __init__(self, customer_id: str, isin: str, requested: Decimal, available: Decimal):
        super().__init__(
            f"customer {customer_id} wanted to sell {requested} units of {isin} but only holds {available}",
            customer_id=customer_id,
            isin=isin,
            requested=requested,
            available=available,
        )
        self.customer_id = customer_id
        self.isin = isin
        self.requested = requested
        self.available = available


class StoreFailureError(LedgerBatchError):
    """Underlying store operation failed."""

    error_kind = "StoreFailure"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message, cause=str(cause) if cause is not None else message)
        self.cause = cause


class CommitFailedError(LedgerBatchError):
    """Final batch commit failed; nothing from the batch is durable."""

    error_kind = "CommitFailed"

    def __init__(self, cause: BaseException):
        super().__init__(f"batch commit failed: {cause}", cause=str(cause))
        self.cause = cause
