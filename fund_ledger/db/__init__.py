"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, LedgerGatewayPort
from .ledger_gateway import SQLAlchemyLedgerGateway
from .reference_data import SQLAlchemyReferenceDataService
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"LedgerGatewayPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyLedgerGateway",
	"SQLAlchemyReferenceDataService",
	"db_create_engine",
]
