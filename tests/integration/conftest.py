"""
Integration fixtures: a real PostgreSQL migrated with alembic.

Enabled with RUN_INTEGRATION=1; DATABASE_URL must point at a disposable database.
"""

import os
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[2]
RUN_INTEGRATION = os.getenv("RUN_INTEGRATION") == "1"


def pytest_collection_modifyitems(config, items) -> None:
    if RUN_INTEGRATION:
        return
    skip = pytest.mark.skip(reason="Set RUN_INTEGRATION=1 to run integration tests")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def migrated() -> None:
    from alembic import command
    from alembic.config import Config

    config = Config(str(ROOT_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT_DIR / "alembic"))
    command.upgrade(config, "head")


@pytest.fixture
def database(migrated, settings_factory):
    from app.infrastructure.db import Database

    db = Database(
        settings_factory(
            database_url=os.environ["DATABASE_URL"], db_pool_min_size=1
        )
    )
    db.open()
    db.query("TRUNCATE employees RESTART IDENTITY")
    yield db
    db.close()
