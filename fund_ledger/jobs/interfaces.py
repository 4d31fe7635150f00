"""Typed interfaces for job-layer batch orchestration."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, Union

from fund_ledger.domain import LedgerBatchError


@dataclass(frozen=True)
class BatchCommitted:
    """Outcome of a batch whose instructions were all posted and committed.

    Attributes:
        count: Number of applied instructions.
        timeline: Ordered stage events for diagnostics.
    """

    count: int
    timeline: list[dict[str, object]] = field(default_factory=list)

    status = "committed"


@dataclass(frozen=True)
class BatchFailed:
    """Outcome of a batch that was rolled back.

    Attributes:
        line_number: 1-based line of the failing record, or None when the failure
            is not tied to a line (scope open or commit failures).
        error: First error encountered; the batch stopped there.
        timeline: Ordered stage events for diagnostics.
    """

    line_number: int | None
    error: LedgerBatchError
    timeline: list[dict[str, object]] = field(default_factory=list)

    status = "failed"


BatchOutcome = Union[BatchCommitted, BatchFailed]


class BatchCoordinatorPort(Protocol):
    """Port definition for running one instruction batch atomically."""

    def job_run(self, batch_source: Iterable[bytes | str]) -> BatchOutcome:
        """Apply every instruction of one batch or none of them.

        Args:
            batch_source: Batch lines, header first.

        Returns:
            BatchOutcome: Committed count or the first failure.
        """


def job_format_failure_line(outcome: BatchFailed) -> str:
    """Render a failed outcome as one user-facing message.

    Args:
        outcome: Failed batch outcome.

    Returns:
        str: `<ErrorKind> at line <n>: <context fields>`; `-` replaces a missing line.
    """

    line_text = str(outcome.line_number) if outcome.line_number is not None else "-"
    return f"{outcome.error.error_kind} at line {line_text}: {outcome.error.error_context_text()}"
