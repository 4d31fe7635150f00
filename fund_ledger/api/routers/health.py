"""Health endpoint router for application and ledger store state."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from fund_ledger.db import DatabaseHealthPort


def api_create_health_router(db_health_service: DatabaseHealthPort) -> APIRouter:
    """Create health-check router.

    Args:
        db_health_service: DB-layer health service interface.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Report whether batches can be applied right now.

        Returns:
            JSONResponse: 200 when the store is reachable and migrated; 503 when it is
                unreachable (`database: down`) or lacks ledger tables (`database: degraded`).
        """

        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            return _api_health_response(database_state="down", detail=str(error), target=db_health_service)

        return _api_health_response(
            database_state=db_health.status,
            detail=db_health.detail,
            target=db_health_service,
        )

    return router


def _api_health_response(database_state: str, detail: str, target: DatabaseHealthPort) -> JSONResponse:
    store_ready = database_state == "ok"
    payload = {
        "status": "ok" if store_ready else "degraded",
        "app": "up",
        "database": database_state,
        "detail": detail,
        "target": target.db_connection_label(),
    }
    return JSONResponse(
        content=payload,
        status_code=status.HTTP_200_OK if store_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
