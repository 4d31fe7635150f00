"""Alembic environment for the ledger schema.

The target store is resolved in order from `config.attributes["database_url"]`
(programmatic runs), `-x database_url=...` (command line) and finally the
`DATABASE_URL` runtime setting.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from fund_ledger.config import config_load_database_url

config = context.config

if config.config_file_name is not None and not config.attributes.get("skip_logging_config"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _alembic_resolve_database_url() -> str:
    programmatic_url = config.attributes.get("database_url")
    if programmatic_url:
        return programmatic_url
    command_line_url = context.get_x_argument(as_dictionary=True).get("database_url")
    if command_line_url:
        return command_line_url
    return config_load_database_url()


def run_migrations_offline() -> None:
    """Emit ledger schema SQL without a live connection."""

    context.configure(
        url=_alembic_resolve_database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply ledger schema migrations against the resolved store."""

    connectable = create_engine(_alembic_resolve_database_url(), poolclass=pool.NullPool)
    try:
        with connectable.connect() as connection:
            context.configure(connection=connection, target_metadata=None)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
