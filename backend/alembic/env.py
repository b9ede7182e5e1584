# backend/alembic/env.py
import os
import sys

# Add backend to Python path so we can import database package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from logging.config import fileConfig  # noqa: E402

from alembic import context  # noqa: E402
from sqlalchemy import engine_from_config, pool  # noqa: E402

# Importing config loads .env from the project root
from config import load_app_config  # noqa: E402

# this is the Alembic Config object
config = context.config

# A URL passed programmatically wins, then DATABASE_URL (or TEST_DATABASE_URL
# when TESTING=true); the alembic.ini value is never used
config.set_main_option(
    "sqlalchemy.url",
    config.attributes.get("sqlalchemy_url") or load_app_config().database_url,
)

# Interpret the config file for Python logging (callers embedding Alembic,
# such as the test suite, opt out with configure_logger=False)
if config.config_file_name is not None and config.attributes.get(
    "configure_logger", True
):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Import Base and all models for autogenerate support
from database.base import Base  # noqa: E402
from database.models import (  # noqa: E402, F401
    EmailProcessingLog,
    LedgerEntry,
    ReconciliationHistory,
)

# Set target metadata for autogenerate
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL, so no DBAPI is needed;
    context.execute() calls emit SQL to the script output.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite cannot ALTER most constraints in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
