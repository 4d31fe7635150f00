"""Batch upload router: apply one instruction file atomically over HTTP."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from fund_ledger.domain import CommitFailedError, StoreFailureError
from fund_ledger.jobs import BatchCommitted, BatchCoordinatorPort, BatchFailed, job_format_failure_line


def api_create_batch_router(coordinator_factory: Callable[[], BatchCoordinatorPort]) -> APIRouter:
    """Create router exposing batch application.

    Args:
        coordinator_factory: Builds a fresh batch coordinator per request.

    Returns:
        APIRouter: Router exposing `POST /batches`.

    Raises:
        ValueError: Raised when coordinator_factory is invalid.
    """

    if coordinator_factory is None:
        raise ValueError("coordinator_factory must not be None")

    router = APIRouter(prefix="/batches", tags=["batches"])

    @router.post("")
    async def api_batch_apply(request: Request) -> JSONResponse:
        """Apply the request body as one instruction batch file.

        Returns:
            JSONResponse: 200 on commit; 422 for a rejected batch; 503 when the store failed.
        """

        body = await request.body()
        coordinator = coordinator_factory()
        outcome = await run_in_threadpool(coordinator.job_run, body.splitlines(keepends=True))

        if isinstance(outcome, BatchCommitted):
            payload = {"status": outcome.status, "count": outcome.count}
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

        return JSONResponse(
            content=api_serialize_batch_failure(outcome),
            status_code=(
                status.HTTP_503_SERVICE_UNAVAILABLE
                if isinstance(outcome.error, (StoreFailureError, CommitFailedError))
                else status.HTTP_422_UNPROCESSABLE_ENTITY
            ),
        )

    return router


def api_serialize_batch_failure(outcome: BatchFailed) -> dict[str, object]:
    """Serialize one failed batch outcome to JSON payload.

    Args:
        outcome: Failed batch outcome.

    Returns:
        dict[str, object]: JSON-compatible failure payload; decimals and dates as strings.
    """

    return {
        "status": outcome.status,
        "error_kind": outcome.error.error_kind,
        "line_number": outcome.line_number,
        "message": job_format_failure_line(outcome),
        "context": {
            key: value if isinstance(value, (int, str)) else str(value)
            for key, value in outcome.error.context.items()
        },
    }
