"""Plant row operations.

IMPORT CONVENTION:
- Database exposes these through the db.plants property

Plants are numbered per area: seq restarts at 1 inside each area.
"""

from typing import TYPE_CHECKING

import sqlite3

if TYPE_CHECKING:
    from . import Database


class PlantOperations:
    """Row-level primitives for the plants table."""

    def __init__(self, db: "Database"):
        self._db = db

    def insert(
        self,
        plant_id: str,
        area_id: str,
        seed_id: str | None,
        seed_title: str | None,
        seed_category: str | None,
        seed_image: str | None,
        planted_date: str,
        stage: str | None = None,
    ) -> None:
        """Insert a plant at the end of its area.

        Raises:
            sqlite3.IntegrityError: If plant_id exists or area_id does not
        """
        self._db.execute(
            """INSERT INTO plants (id, area_id, seed_id, seed_title, seed_category,
                                   seed_image, planted_date, stage, seq)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?,
                       (SELECT COALESCE(MAX(seq), 0) + 1 FROM plants WHERE area_id = ?))""",
            (
                plant_id,
                area_id,
                seed_id,
                seed_title,
                seed_category,
                seed_image,
                planted_date,
                stage,
                area_id,
            ),
        )

    def update_stage(self, plant_id: str, stage: str | None) -> bool:
        """Set (or clear, with None) a plant's stage.

        Returns:
            True if the plant was found and updated
        """
        cursor = self._db.execute(
            "UPDATE plants SET stage = ? WHERE id = ?",
            (stage, plant_id),
        )
        return cursor.rowcount > 0

    def delete(self, plant_id: str) -> bool:
        """Delete a plant; its journal entries cascade."""
        cursor = self._db.execute("DELETE FROM plants WHERE id = ?", (plant_id,))
        return cursor.rowcount > 0

    def list_by_area(self, area_id: str) -> list[sqlite3.Row]:
        """Plants of one area in insertion order."""
        return self._db.fetch_all(
            "SELECT * FROM plants WHERE area_id = ? ORDER BY seq ASC",
            (area_id,),
        )

    def get_by_id(self, plant_id: str) -> sqlite3.Row | None:
        return self._db.fetch_one("SELECT * FROM plants WHERE id = ?", (plant_id,))

    def count(self, area_id: str | None = None) -> int:
        """Count plants, optionally within one area."""
        if area_id:
            row = self._db.fetch_one(
                "SELECT COUNT(*) FROM plants WHERE area_id = ?", (area_id,)
            )
        else:
            row = self._db.fetch_one("SELECT COUNT(*) FROM plants")
        return row[0]
