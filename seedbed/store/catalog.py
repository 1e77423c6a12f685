"""Custom catalog entry row operations.

Rows arrive already in column shape (JSON text, 0/1 integers);
seedbed.access does the conversion from CustomCatalogEntry.
"""

from typing import TYPE_CHECKING, Any

import sqlite3

from . import query

if TYPE_CHECKING:
    from . import Database

CATALOG_COLUMNS = (
    "id",
    "title",
    "category",
    "scientific_name",
    "description",
    "image_url",
    "planting_seasons",
    "best_months",
    "sun_requirements",
    "watering",
    "frost_tolerance",
    "difficulty",
    "plant_life",
    "suitable_for_containers",
    "requires_trellis",
    "days_to_germination",
    "days_to_harvest",
    "sowing_depth",
    "spacing",
    "companion_plants",
    "plant_height",
    "drought_tolerant",
    "is_custom",
)


class CustomCatalogOperations:
    """Row-level primitives for the custom_catalog_entries table."""

    def __init__(self, db: "Database"):
        self._db = db

    def insert(self, row: dict[str, Any]) -> None:
        """Insert one entry at the end of the custom catalog.

        Args:
            row: Column values; missing columns are written as NULL

        Raises:
            ValueError: If row contains a key that is not a catalog column
            sqlite3.IntegrityError: If the id already exists
        """
        unknown = set(row) - set(CATALOG_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown catalog columns: {sorted(unknown)}")

        values = {column: row.get(column) for column in CATALOG_COLUMNS}
        sql, params = query.build_insert(
            "custom_catalog_entries",
            values,
            computed={"seq": "(SELECT COALESCE(MAX(seq), 0) + 1 FROM custom_catalog_entries)"},
        )
        self._db.execute(sql, params)

    def list_all(self) -> list[sqlite3.Row]:
        """All custom entries in insertion order."""
        return self._db.fetch_all("SELECT * FROM custom_catalog_entries ORDER BY seq ASC")

    def count(self) -> int:
        return self._db.fetch_one("SELECT COUNT(*) FROM custom_catalog_entries")[0]
