"""Seedbed - local persistence and state sync for a home garden tracker."""

__version__ = "0.1.0"

from .app import GardenApp
from .catalog import CatalogView, filter_catalog, load_static_catalog
from .consistency import SystemStatus
from .garden import GardenStore
from .models import (
    Area,
    CustomCatalogEntry,
    EntryType,
    JournalEntry,
    Plant,
    Preferences,
    Stage,
)
from .settings_store import SettingsStore
from .store import Database, get_database, init_db
from .writer import BackgroundWriter

__all__ = [
    "GardenApp",
    "GardenStore",
    "SettingsStore",
    "CatalogView",
    "BackgroundWriter",
    "Database",
    "get_database",
    "init_db",
    "load_static_catalog",
    "filter_catalog",
    "SystemStatus",
    "Area",
    "Plant",
    "JournalEntry",
    "EntryType",
    "Stage",
    "CustomCatalogEntry",
    "Preferences",
]
