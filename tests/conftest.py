"""Pytest fixtures for seedbed tests."""

import logging
from datetime import date

import pytest

from seedbed.garden import GardenStore
from seedbed.host.logs import PACKAGE_LOGGER
from seedbed.store import Database, reset_databases
from seedbed.writer import BackgroundWriter

SEEDBED_ENV_VARS = (
    "SEEDBED_DB",
    "SEEDBED_DATA_DIR",
    "SEEDBED_CONFIG_DIR",
    "SEEDBED_CONFIG",
    "SEEDBED_LOG_LEVEL",
    "SEEDBED_LOG_FILE",
    "SEEDBED_CATALOG",
)

TODAY = date(2026, 10, 16)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep every test away from the real home directory and env vars.

    Also forgets process-wide databases afterwards so a path reused by
    another test gets a fresh Database.
    """
    for key in SEEDBED_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    yield
    reset_databases()


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers and level set by configure_logging() during a test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "garden.db"


@pytest.fixture
def db(db_path):
    """An initialized Database on a fresh file."""
    database = Database(db_path)
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def broken_db(tmp_path):
    """A Database that can never open: its parent directory is a file."""
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    return Database(blocker / "garden.db")


@pytest.fixture
def writer():
    background = BackgroundWriter()
    yield background
    background.shutdown()


@pytest.fixture
def garden(db, writer):
    """A loaded GardenStore whose clock is pinned to TODAY."""
    store = GardenStore(db, writer, clock=lambda: TODAY)
    store.load()
    yield store
    store.flush()


@pytest.fixture
def lettuce():
    """A custom-style catalog record."""
    return {"id": "c1", "title": "Lettuce", "category": "Vegetable"}


@pytest.fixture
def tomato():
    """A built-in style catalog record (named under 'name')."""
    return {
        "id": "tomato",
        "name": "Tomato",
        "category": "Fruit",
        "image_url": "https://example.org/tomato.jpg",
    }
