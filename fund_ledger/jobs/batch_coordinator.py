"""Job-layer batch coordinator with all-or-nothing commit semantics."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from fund_ledger.db import LedgerGatewayPort
from fund_ledger.domain import (
    CommitFailedError,
    InstructionState,
    LedgerBatchError,
    MalformedRecordError,
    StoreFailureError,
    domain_build_instruction_event,
    domain_build_stage_event,
    domain_read_instructions,
)
from fund_ledger.ledger import TradeApplierPort

from .interfaces import BatchCommitted, BatchCoordinatorPort, BatchFailed, BatchOutcome

logger = structlog.get_logger(__name__)


class BatchCoordinator(BatchCoordinatorPort):
    """Run one instruction batch inside a single ledger transaction scope.

    The coordinator stops at the first failing record, rolls the scope back and
    reports that record's line number. No error is retried or skipped.
    """

    def __init__(self, gateway: LedgerGatewayPort, trade_applier: TradeApplierPort):
        """Initialize batch coordinator dependencies.

        Args:
            gateway: Ledger gateway that owns the batch scope.
            trade_applier: Per-instruction applier bound to the same gateway.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if gateway is None:
            raise ValueError("gateway must not be None")
        if trade_applier is None:
            raise ValueError("trade_applier must not be None")
        self._gateway = gateway
        self._trade_applier = trade_applier

    def job_run(self, batch_source: Iterable[bytes | str]) -> BatchOutcome:
        """Apply every instruction of one batch or none of them.

        Args:
            batch_source: Batch lines, header first (e.g. a binary file handle).

        Returns:
            BatchOutcome: `BatchCommitted` with the applied count, or `BatchFailed`
                with the first error and its line number.

        Raises:
            Exception: Non-ledger exceptions propagate after the scope is rolled back.
        """

        timeline: list[dict[str, object]] = [domain_build_stage_event(stage="batch", status="started")]
        logger.info("batch_started")

        try:
            self._gateway.db_begin()
        except StoreFailureError as error:
            timeline.append(
                domain_build_stage_event(stage="batch", status="failed", details={"error_kind": error.error_kind})
            )
            logger.error("batch_scope_open_failed", error=str(error))
            return BatchFailed(line_number=None, error=error, timeline=timeline)

        applied_count = 0
        current_line_number: int | None = None
        try:
            for record in domain_read_instructions(batch_source):
                current_line_number = record.line_number
                self._trade_applier.ledger_apply(record.instruction)
                applied_count += 1
                timeline.append(domain_build_instruction_event(record.line_number, InstructionState.POSTED))
        except LedgerBatchError as error:
            failed_line_number = error.line_number if isinstance(error, MalformedRecordError) else current_line_number
            return self._job_fail(error=error, line_number=failed_line_number, timeline=timeline)
        except BaseException:
            self._job_rollback_quietly(timeline)
            raise

        try:
            self._gateway.db_commit()
        except StoreFailureError as error:
            commit_error = CommitFailedError(cause=error)
            timeline.append(
                domain_build_stage_event(stage="commit", status="failed", details={"error_kind": commit_error.error_kind})
            )
            logger.error("batch_commit_failed", error=str(error))
            return BatchFailed(line_number=None, error=commit_error, timeline=timeline)

        timeline.append(domain_build_stage_event(stage="commit", status="completed", details={"count": applied_count}))
        logger.info("batch_committed", count=applied_count)
        return BatchCommitted(count=applied_count, timeline=timeline)

    def _job_fail(
        self,
        error: LedgerBatchError,
        line_number: int | None,
        timeline: list[dict[str, object]],
    ) -> BatchFailed:
        """Roll back the scope and build the failed outcome.

        Args:
            error: First batch error.
            line_number: Line of the failing record.
            timeline: Mutable stage timeline.

        Returns:
            BatchFailed: Failed outcome carrying the original error.
        """

        if line_number is not None:
            timeline.append(domain_build_instruction_event(line_number, InstructionState.FAILED, error.error_kind))
        self._job_rollback_quietly(timeline)
        logger.warning(
            "batch_rolled_back",
            error_kind=error.error_kind,
            line_number=line_number,
            **{key: str(value) for key, value in error.context.items() if key != "line_number"},
        )
        return BatchFailed(line_number=line_number, error=error, timeline=timeline)

    def _job_rollback_quietly(self, timeline: list[dict[str, object]]) -> None:
        """Roll back while a first error is already being reported.

        A rollback failure is logged and recorded in the timeline; the store
        discards the uncommitted transaction when the connection is closed.

        Args:
            timeline: Mutable stage timeline.
        """

        try:
            self._gateway.db_rollback()
        except StoreFailureError as rollback_error:
            logger.exception("batch_rollback_failed", error=str(rollback_error))
            timeline.append(domain_build_stage_event(stage="rollback", status="failed"))
            return
        timeline.append(domain_build_stage_event(stage="rollback", status="completed"))
