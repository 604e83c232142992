"""Alembic environment for stock tracker schema migrations.

The database URL always comes from `DATABASE_URL` (or `.env`), never from
`alembic.ini`, so migrations and the runtime share one source of truth.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from stock_tracker.config import config_load_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

database_url = config_load_database_url()


def run_migrations_offline() -> None:
    """Emit migration SQL without a live connection."""

    context.configure(
        url=database_url,
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a single unpooled connection."""

    connectable = create_engine(database_url, poolclass=pool.NullPool)
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
