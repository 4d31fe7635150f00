"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI
from sqlalchemy import Engine

from fund_ledger.api import create_api_application
from fund_ledger.config import AppSettings, config_load_settings
from fund_ledger.db import SQLAlchemyDatabaseHealthService, SQLAlchemyLedgerGateway, db_create_engine
from fund_ledger.jobs import BatchCoordinator
from fund_ledger.ledger import NavPricingService, TradeApplier, TradeApplierConfig
from fund_ledger.logging import setup_logging


def bootstrap_create_batch_coordinator(engine: Engine, settings: AppSettings) -> BatchCoordinator:
    """Wire one batch coordinator with its own gateway scope owner.

    A gateway holds a single open scope, so every batch run gets fresh
    collaborators bound to the shared engine.

    Args:
        engine: SQLAlchemy engine for the ledger store.
        settings: Validated runtime settings.

    Returns:
        BatchCoordinator: Coordinator ready for one `job_run` call.
    """

    gateway = SQLAlchemyLedgerGateway(engine=engine)
    trade_applier = TradeApplier(
        gateway=gateway,
        pricing_service=NavPricingService(gateway=gateway),
        config=TradeApplierConfig(
            division_scale=settings.unit_division_scale,
            rounding_mode=settings.rounding_mode,
        ),
    )
    return BatchCoordinator(gateway=gateway, trade_applier=trade_applier)


def bootstrap_create_cli_coordinator() -> BatchCoordinator:
    """Build a batch coordinator for the command-line surface.

    Returns:
        BatchCoordinator: Fully wired coordinator.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    engine = db_create_engine(database_url=settings.database_url)
    return bootstrap_create_batch_coordinator(engine=engine, settings=settings)


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    engine = db_create_engine(database_url=settings.database_url)
    return create_api_application(
        settings=settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        coordinator_factory=lambda: bootstrap_create_batch_coordinator(engine=engine, settings=settings),
        gateway_factory=lambda: SQLAlchemyLedgerGateway(engine=engine),
    )
