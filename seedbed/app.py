"""Application wiring.

GardenApp builds the object graph once: one Database, one BackgroundWriter
shared by both stores, the garden and settings stores, and the merged
catalog view. UI code receives the GardenApp (or the stores it holds) and
never reaches for module globals.

USAGE:
    app = GardenApp.open()
    area = app.garden.create_area("Planter Box 1")
    ...
    app.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .catalog import CatalogView, load_static_catalog
from .config import Settings
from .consistency import SystemStatus
from .garden import GardenStore
from .host.logs import configure_logging
from .settings_store import SettingsStore
from .store import Database, get_database
from .writer import BackgroundWriter

logger = logging.getLogger(__name__)


@dataclass
class GardenApp:
    """The running application's services."""

    settings: Settings
    database: Database
    writer: BackgroundWriter
    garden: GardenStore
    preferences: SettingsStore
    catalog: CatalogView

    @classmethod
    def open(cls, settings: Settings | None = None) -> GardenApp:
        """Configure logging, open the database and load both stores.

        Never fails because of the database: if it cannot be opened the
        garden starts empty with status DEGRADED and works in memory only.
        """
        settings = settings or Settings()
        configure_logging(settings.log_level, settings.log_file)

        database = get_database(settings.database_path)
        writer = BackgroundWriter()
        garden = GardenStore(database, writer)
        preferences = SettingsStore(database, writer)

        try:
            static_entries = load_static_catalog(settings.catalog_path)
        except (OSError, ValueError) as e:
            logger.error("Could not load built-in catalog: %s", e)
            static_entries = ()

        garden.load()
        preferences.load()

        if garden.status != SystemStatus.NORMAL:
            logger.warning("Garden opened in %s mode", garden.status.value)

        return cls(
            settings=settings,
            database=database,
            writer=writer,
            garden=garden,
            preferences=preferences,
            catalog=CatalogView(static_entries, garden),
        )

    @property
    def status(self) -> SystemStatus:
        return self.garden.status

    def close(self) -> None:
        """Finish pending writes, stop the writer and close the database."""
        self.writer.flush()
        self.writer.shutdown()
        self.database.close()
