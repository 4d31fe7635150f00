"""Database engine utilities.

This module centralizes database connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for ledger store access.

    Args:
        database_url: SQLAlchemy database URL (the single store connection descriptor).

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    normalized_database_url = database_url.strip()
    if not normalized_database_url:
        raise ValueError("database_url must not be blank")

    return create_engine(normalized_database_url, pool_pre_ping=True)

