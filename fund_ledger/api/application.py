"""FastAPI application factory for the ledger service."""

from collections.abc import Callable

from fastapi import FastAPI

from fund_ledger.config import AppSettings
from fund_ledger.db import DatabaseHealthPort, LedgerGatewayPort
from fund_ledger.jobs import BatchCoordinatorPort

from .routers import api_create_batch_router, api_create_health_router, api_create_position_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    coordinator_factory: Callable[[], BatchCoordinatorPort],
    gateway_factory: Callable[[], LedgerGatewayPort],
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        coordinator_factory: Builds a fresh batch coordinator per upload.
        gateway_factory: Builds a fresh ledger gateway per position read.

    Returns:
        FastAPI: Framework application instance with all routers.
    """

    application = FastAPI(title="Fund Trade Ledger")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identity for bootstrap verification.

        Returns:
            dict[str, str]: Service name and environment.
        """

        return {
            "service": "fund-ledger",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_batch_router(coordinator_factory=coordinator_factory))
    application.include_router(api_create_position_router(gateway_factory=gateway_factory))

    return application
