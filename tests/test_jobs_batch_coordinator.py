"""Regression tests for all-or-nothing batch coordination."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fund_ledger.domain import (
    CommitFailedError,
    InsufficientCashError,
    MalformedRecordError,
    StoreFailureError,
)
from fund_ledger.jobs import BatchCommitted, BatchCoordinator, BatchFailed, job_format_failure_line
from fund_ledger.ledger import NavPricingService, TradeApplier
from tests.helpers.stubs import InMemoryLedgerGateway

_HEADER = "customer_id,operation,amount,isin,value_date\n"


class _ExplodingTradeApplier:
    """Trade applier stub raising a non-ledger exception."""

    def ledger_apply(self, instruction) -> None:
        raise KeyError("unexpected")


def _build_coordinator(cash: str = "1000") -> tuple[BatchCoordinator, InMemoryLedgerGateway]:
    gateway = InMemoryLedgerGateway(
        customers={"C1"},
        navs={("ISIN-A", date(2024, 1, 2)): [Decimal("10")]},
    )
    gateway.committed_cash.append(("C1", date(2024, 1, 1), Decimal(cash)))
    trade_applier = TradeApplier(gateway=gateway, pricing_service=NavPricingService(gateway=gateway))
    return BatchCoordinator(gateway=gateway, trade_applier=trade_applier), gateway


def test_job_run_commits_every_instruction() -> None:
    """Commit all postings of a valid batch in one scope.

    Returns:
        None: Assertions validate committed outcome and ledger rows.

    Raises:
        AssertionError: Raised when rows or counts differ.
    """

    coordinator, gateway = _build_coordinator()

    outcome = coordinator.job_run(
        [_HEADER, "C1,BUY,100,ISIN-A,2024-01-02\n", "C1,SELL,4,ISIN-A,2024-01-02\n"]
    )

    assert isinstance(outcome, BatchCommitted)
    assert outcome.count == 2
    assert outcome.status == "committed"
    assert gateway.calls.count("begin") == 1
    assert gateway.calls.count("commit") == 1
    assert gateway.db_cash_balance(customer_id="C1") == Decimal("940")
    assert gateway.db_unit_holding(customer_id="C1", isin="ISIN-A") == Decimal("6")


def test_job_run_header_only_commits_empty_batch() -> None:
    """Commit a header-only batch as a no-op."""

    coordinator, gateway = _build_coordinator()

    outcome = coordinator.job_run([_HEADER])

    assert isinstance(outcome, BatchCommitted)
    assert outcome.count == 0
    assert gateway.committed_units == []


def test_job_run_rolls_back_earlier_postings_on_malformed_line() -> None:
    """Discard postings of valid lines that precede a malformed line.

    Returns:
        None: Assertions validate rollback and reported line number.

    Raises:
        AssertionError: Raised when earlier postings survive.
    """

    coordinator, gateway = _build_coordinator()

    outcome = coordinator.job_run([_HEADER, "C1,BUY,100,ISIN-A,2024-01-02\n", "C1,BUY,abc,ISIN-A,2024-01-02\n"])

    assert isinstance(outcome, BatchFailed)
    assert outcome.status == "failed"
    assert outcome.line_number == 3
    assert isinstance(outcome.error, MalformedRecordError)
    assert "commit" not in gateway.calls
    assert gateway.calls[-1] == "rollback"
    assert gateway.committed_cash == [("C1", date(2024, 1, 1), Decimal("1000"))]
    assert gateway.committed_units == []


def test_job_run_reports_first_business_failure_line() -> None:
    """Stop at the first failing instruction and report its line."""

    coordinator, gateway = _build_coordinator(cash="150")

    outcome = coordinator.job_run(
        [
            _HEADER,
            "C1,BUY,100,ISIN-A,2024-01-02\n",
            "\n",
            "C1,BUY,100,ISIN-A,2024-01-02\n",
            "C9,BUY,1,ISIN-A,2024-01-02\n",
        ]
    )

    assert isinstance(outcome, BatchFailed)
    assert outcome.line_number == 4
    assert isinstance(outcome.error, InsufficientCashError)
    assert gateway.committed_units == []
    assert job_format_failure_line(outcome) == (
        "InsufficientCash at line 4: customer_id=C1 requested=100 available=50"
    )


def test_job_run_records_instruction_timeline() -> None:
    """Record posted and failed instruction events followed by rollback."""

    coordinator, _ = _build_coordinator(cash="100")

    outcome = coordinator.job_run([_HEADER, "C1,BUY,100,ISIN-A,2024-01-02\n", "C1,BUY,1,ISIN-A,2024-01-02\n"])

    assert [(event["stage"], event["status"]) for event in outcome.timeline] == [
        ("batch", "started"),
        ("instruction", "posted"),
        ("instruction", "failed"),
        ("rollback", "completed"),
    ]
    assert outcome.timeline[2]["details"] == {"line_number": 3, "error_kind": "InsufficientCash"}


def test_job_run_reports_commit_failure_without_line() -> None:
    """Map a failing final commit to a line-less commit failure.

    Returns:
        None: Assertions validate commit failure mapping.

    Raises:
        AssertionError: Raised when the failure is attributed to a record.
    """

    coordinator, gateway = _build_coordinator()
    gateway.fail_commit = True

    outcome = coordinator.job_run([_HEADER, "C1,BUY,100,ISIN-A,2024-01-02\n"])

    assert isinstance(outcome, BatchFailed)
    assert outcome.line_number is None
    assert isinstance(outcome.error, CommitFailedError)
    assert gateway.committed_units == []
    assert job_format_failure_line(outcome) == "CommitFailed at line -: cause=serialization failure"


def test_job_run_reports_scope_open_failure() -> None:
    """Fail without reading the source when the scope cannot be opened."""

    coordinator, gateway = _build_coordinator()
    gateway.fail_begin = True

    outcome = coordinator.job_run(iter(()))

    assert isinstance(outcome, BatchFailed)
    assert outcome.line_number is None
    assert isinstance(outcome.error, StoreFailureError)
    assert gateway.calls == ["begin"]


def test_job_run_keeps_first_error_when_rollback_fails() -> None:
    """Report the original error even when the rollback itself fails."""

    coordinator, gateway = _build_coordinator()
    gateway.fail_rollback = True

    outcome = coordinator.job_run([_HEADER, "C2,BUY,1,ISIN-A,2024-01-02\n"])

    assert isinstance(outcome, BatchFailed)
    assert outcome.error.error_kind == "UnknownCustomer"
    assert outcome.timeline[-1]["stage"] == "rollback"
    assert outcome.timeline[-1]["status"] == "failed"


def test_job_run_rolls_back_and_reraises_unexpected_errors() -> None:
    """Roll the scope back before propagating a non-ledger exception."""

    gateway = InMemoryLedgerGateway()
    coordinator = BatchCoordinator(gateway=gateway, trade_applier=_ExplodingTradeApplier())

    with pytest.raises(KeyError):
        coordinator.job_run([_HEADER, "C1,BUY,1,ISIN-A,2024-01-02\n"])

    assert gateway.calls == ["begin", "rollback"]
    assert gateway.scope_open is False


def test_job_run_fails_missing_header_at_line_one() -> None:
    """Report an empty source as a malformed record on line 1."""

    coordinator, _ = _build_coordinator()

    outcome = coordinator.job_run([])

    assert isinstance(outcome, BatchFailed)
    assert outcome.line_number == 1
    assert job_format_failure_line(outcome) == "MalformedRecord at line 1: line_number=1 reason=missing header line"


@pytest.mark.parametrize(("gateway", "trade_applier"), [(None, object()), (object(), None)])
def test_batch_coordinator_requires_dependencies(gateway, trade_applier) -> None:
    """Reject construction without collaborators."""

    with pytest.raises(ValueError):
        BatchCoordinator(gateway=gateway, trade_applier=trade_applier)
