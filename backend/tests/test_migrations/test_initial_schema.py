"""Tests for the Alembic migration chain."""

from alembic import command
from sqlalchemy import create_engine, inspect

EXPECTED_TABLES = {"ledger", "email_processing_log", "reconciliation_history"}


def table_names(url):
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names()) - {"alembic_version"}
    finally:
        engine.dispose()


def test_upgrade_creates_tables(alembic_config, migration_db_url, clean_migration_state):
    command.upgrade(alembic_config, "head")

    assert table_names(migration_db_url) == EXPECTED_TABLES

    engine = create_engine(migration_db_url)
    try:
        inspector = inspect(engine)
        ledger_columns = {column["name"] for column in inspector.get_columns("ledger")}
        ledger_indexes = {index["name"] for index in inspector.get_indexes("ledger")}
    finally:
        engine.dispose()

    assert {"merchant_name", "amount", "date", "category", "email_id", "receipt_text"} <= (
        ledger_columns
    )
    assert {"idx_ledger_date", "idx_ledger_category", "idx_ledger_email_id"} <= ledger_indexes


def test_downgrade_removes_tables(alembic_config, migration_db_url, clean_migration_state):
    command.upgrade(alembic_config, "head")
    command.downgrade(alembic_config, "base")

    assert table_names(migration_db_url) == set()


def test_schema_matches_models(alembic_config, migration_db_url, clean_migration_state):
    """The migrated schema has every column the ORM models declare."""
    from database.base import Base

    command.upgrade(alembic_config, "head")

    engine = create_engine(migration_db_url)
    try:
        inspector = inspect(engine)
        for table in Base.metadata.sorted_tables:
            migrated = {column["name"] for column in inspector.get_columns(table.name)}
            assert {column.name for column in table.columns} == migrated, table.name
    finally:
        engine.dispose()
