"""Pytest fixtures for Alembic migration tests."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


@pytest.fixture
def migration_db_url(tmp_path):
    """Throwaway SQLite database for one migration test."""
    return f"sqlite:///{tmp_path / 'migrations.db'}"


@pytest.fixture
def alembic_config(migration_db_url):
    """Load Alembic configuration for migration tests.

    Returns:
        Config: alembic.ini configuration pointed at the throwaway database
    """
    config = Config(str(ALEMBIC_INI))
    config.attributes["sqlalchemy_url"] = migration_db_url
    config.attributes["configure_logger"] = False
    return config


@pytest.fixture
def clean_migration_state(alembic_config):
    """Ensure clean migration state for each test.

    This fixture:
    - Downgrades to base before the test
    - Yields control to the test
    - Downgrades to base after the test (cleanup)
    """
    command.downgrade(alembic_config, "base")
    yield
    command.downgrade(alembic_config, "base")
