"""End-to-end batch scenarios against a SQLite-backed ledger."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import Engine

from fund_ledger.bootstrap import bootstrap_create_batch_coordinator
from fund_ledger.config import AppSettings
from fund_ledger.domain import InsufficientCashError
from fund_ledger.jobs import BatchCommitted, BatchFailed
from tests.helpers.ledger import read_balances, read_ledger_rows, seed_cash, seed_units

_HEADER = "customer_id,operation,amount,isin,value_date\n"


@pytest.fixture
def run_batch(ledger_engine: Engine):
    """Return a callable applying batch lines through fully wired collaborators."""

    settings = AppSettings(database_url="sqlite://", log_format="console")

    def _run(*record_lines: str):
        coordinator = bootstrap_create_batch_coordinator(engine=ledger_engine, settings=settings)
        return coordinator.job_run([_HEADER, *(f"{line}\n" for line in record_lines)])

    return _run


@pytest.fixture
def funded_customer(ledger_engine: Engine, reference_data):
    """Seed customer C1 with NAVs for ISIN-A on 2024-01-02 and 2024-01-03."""

    reference_data.db_customers_insert(["C1"])
    reference_data.db_navs_insert(
        [
            ("ISIN-A", date(2024, 1, 2), Decimal("50.00")),
            ("ISIN-A", date(2024, 1, 3), Decimal("60.00")),
        ]
    )
    return "C1"


def test_happy_buy_debits_cash_and_credits_units(ledger_engine, funded_customer, run_batch) -> None:
    """Commit a funded BUY priced at the value-date NAV.

    Returns:
        None: Assertions validate committed balances.

    Raises:
        AssertionError: Raised when balances differ from expected values.
    """

    seed_cash(ledger_engine, funded_customer, date(2024, 1, 1), Decimal("1000.00"))

    outcome = run_batch("C1,BUY,200.00,ISIN-A,2024-01-02")

    assert isinstance(outcome, BatchCommitted)
    assert outcome.count == 1
    assert read_balances(ledger_engine, "C1", "ISIN-A") == (Decimal("800.00"), Decimal("4.00000000"))


def test_insufficient_cash_leaves_ledger_unchanged(ledger_engine, funded_customer, run_batch) -> None:
    """Roll back a BUY larger than the cash balance."""

    seed_cash(ledger_engine, funded_customer, date(2024, 1, 1), Decimal("100.00"))
    rows_before = read_ledger_rows(ledger_engine)

    outcome = run_batch("C1,BUY,200.00,ISIN-A,2024-01-02")

    assert isinstance(outcome, BatchFailed)
    assert isinstance(outcome.error, InsufficientCashError)
    assert outcome.error.requested == Decimal("200.00")
    assert outcome.error.available == Decimal("100.00")
    assert read_ledger_rows(ledger_engine) == rows_before


def test_missing_nav_rolls_back_whole_batch(ledger_engine, funded_customer, run_batch) -> None:
    """Discard an earlier valid BUY when a later line has no NAV.

    Returns:
        None: Assertions validate atomic rollback and reported line.

    Raises:
        AssertionError: Raised when any row from the batch survives.
    """

    seed_cash(ledger_engine, funded_customer, date(2024, 1, 1), Decimal("10000"))
    rows_before = read_ledger_rows(ledger_engine)

    outcome = run_batch("C1,BUY,100,ISIN-A,2024-01-02", "C1,BUY,100,ISIN-X,2024-01-02")

    assert isinstance(outcome, BatchFailed)
    assert outcome.error.error_kind == "NavMissing"
    assert outcome.line_number == 3
    assert read_ledger_rows(ledger_engine) == rows_before


def test_happy_sell_credits_proceeds(ledger_engine, funded_customer, run_batch) -> None:
    """Commit a covered SELL priced at its own value-date NAV."""

    seed_units(ledger_engine, funded_customer, "ISIN-A", date(2024, 1, 2), Decimal("4.00000000"))

    outcome = run_batch("C1,SELL,1.00000000,ISIN-A,2024-01-03")

    assert isinstance(outcome, BatchCommitted)
    assert read_balances(ledger_engine, "C1", "ISIN-A") == (Decimal("60.00"), Decimal("3.00000000"))


def test_ambiguous_nav_is_fatal(ledger_engine, funded_customer, reference_data, run_batch) -> None:
    """Refuse to price against duplicate NAV rows for one fund and date."""

    seed_cash(ledger_engine, funded_customer, date(2024, 1, 1), Decimal("1000"))
    reference_data.db_navs_insert([("ISIN-A", date(2024, 1, 2), Decimal("51.00"))])
    rows_before = read_ledger_rows(ledger_engine)

    outcome = run_batch("C1,BUY,100,ISIN-A,2024-01-02")

    assert isinstance(outcome, BatchFailed)
    assert outcome.error.error_kind == "NavAmbiguous"
    assert outcome.line_number == 2
    assert read_ledger_rows(ledger_engine) == rows_before


def test_later_instruction_sees_earlier_debits(ledger_engine, funded_customer, run_batch) -> None:
    """Fail the third BUY once the first two have spent the balance.

    Returns:
        None: Assertions validate read-your-writes and full rollback.

    Raises:
        AssertionError: Raised when the batch commits or partially persists.
    """

    seed_cash(ledger_engine, funded_customer, date(2024, 1, 1), Decimal("150.00"))
    rows_before = read_ledger_rows(ledger_engine)

    outcome = run_batch(
        "C1,BUY,50.00,ISIN-A,2024-01-02",
        "C1,BUY,50.00,ISIN-A,2024-01-02",
        "C1,BUY,60.00,ISIN-A,2024-01-02",
    )

    assert isinstance(outcome, BatchFailed)
    assert outcome.line_number == 4
    assert outcome.error.requested == Decimal("60.00")
    assert outcome.error.available == Decimal("50.00")
    assert read_ledger_rows(ledger_engine) == rows_before


def test_failed_batch_fails_identically_when_rerun(ledger_engine, funded_customer, run_batch) -> None:
    """Report the same error and line for a rerun of an unchanged failing batch."""

    seed_cash(ledger_engine, funded_customer, date(2024, 1, 1), Decimal("10"))
    lines = ("C1,BUY,5,ISIN-A,2024-01-02", "C1,BUY,6,ISIN-A,2024-01-02")

    first_outcome = run_batch(*lines)
    second_outcome = run_batch(*lines)

    assert (first_outcome.line_number, first_outcome.error.error_kind) == (3, "InsufficientCash")
    assert (second_outcome.line_number, second_outcome.error.error_kind) == (3, "InsufficientCash")


def test_unknown_customer_is_rejected(ledger_engine, funded_customer, run_batch) -> None:
    """Reject an instruction for a customer that was never seeded."""

    rows_before = read_ledger_rows(ledger_engine)

    outcome = run_batch("C404,BUY,0,ISIN-A,2024-01-02")

    assert isinstance(outcome, BatchFailed)
    assert outcome.error.error_kind == "UnknownCustomer"
    assert read_ledger_rows(ledger_engine) == rows_before


def test_zero_amount_buy_posts_zero_rows(ledger_engine, funded_customer, run_batch) -> None:
    """Accept a zero-amount BUY as a valid no-value posting."""

    outcome = run_batch("C1,BUY,0,ISIN-A,2024-01-02")

    assert isinstance(outcome, BatchCommitted)
    assert len(read_ledger_rows(ledger_engine)["cash_transaction"]) == 1
    assert read_balances(ledger_engine, "C1", "ISIN-A") == (Decimal("0"), Decimal("0"))


def test_wider_division_scale_is_persisted(ledger_engine, reference_data) -> None:
    """Keep every configured fractional digit of computed units in the store."""

    reference_data.db_customers_insert(["C1"])
    reference_data.db_navs_insert([("ISIN-A", date(2024, 1, 2), Decimal("3"))])
    seed_cash(ledger_engine, "C1", date(2024, 1, 1), Decimal("5"))
    coordinator = bootstrap_create_batch_coordinator(
        engine=ledger_engine,
        settings=AppSettings(database_url="sqlite://", unit_division_scale=12),
    )

    outcome = coordinator.job_run([_HEADER, "C1,BUY,1,ISIN-A,2024-01-02\n"])

    assert isinstance(outcome, BatchCommitted)
    assert read_balances(ledger_engine, "C1", "ISIN-A") == (Decimal("4"), Decimal("0.333333333333"))
