"""Area row operations.

IMPORT CONVENTION:
- Database exposes these through the db.areas property
- Rows are returned as sqlite3.Row; translation to Area lives in seedbed.access

Deleting an area relies on ON DELETE CASCADE to remove its plants and their
journal entries; no separate plant or journal deletes are issued.
"""

from typing import TYPE_CHECKING

import sqlite3

from ..exceptions import ResourceNotFound

if TYPE_CHECKING:
    from . import Database


class AreaOperations:
    """Row-level primitives for the areas table."""

    def __init__(self, db: "Database"):
        """Initialize area operations.

        Args:
            db: Database the statements run on
        """
        self._db = db

    def insert(self, area_id: str, name: str, emoji: str, created_at: str) -> None:
        """Insert an area at the end of the area order.

        Raises:
            sqlite3.IntegrityError: If area_id already exists
        """
        self._db.execute(
            """INSERT INTO areas (id, name, emoji, created_at, seq)
               VALUES (?, ?, ?, ?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM areas))""",
            (area_id, name, emoji, created_at),
        )

    def update(self, area_id: str, name: str, emoji: str | None = None) -> bool:
        """Update an area's name, and its emoji when one is given.

        Returns:
            True if the area was found and updated
        """
        if emoji is None:
            cursor = self._db.execute(
                "UPDATE areas SET name = ? WHERE id = ?",
                (name, area_id),
            )
        else:
            cursor = self._db.execute(
                "UPDATE areas SET name = ?, emoji = ? WHERE id = ?",
                (name, emoji, area_id),
            )
        return cursor.rowcount > 0

    def delete(self, area_id: str) -> bool:
        """Delete an area; its plants and journal entries cascade.

        Returns:
            True if the area existed
        """
        cursor = self._db.execute("DELETE FROM areas WHERE id = ?", (area_id,))
        return cursor.rowcount > 0

    def list_all(self) -> list[sqlite3.Row]:
        """All areas in insertion order."""
        return self._db.fetch_all("SELECT * FROM areas ORDER BY seq ASC")

    def get_by_id(self, area_id: str) -> sqlite3.Row:
        """Get area by ID.

        Raises:
            ResourceNotFound: If area_id doesn't exist
        """
        row = self._db.fetch_one("SELECT * FROM areas WHERE id = ?", (area_id,))
        if row is None:
            raise ResourceNotFound(
                f"Area '{area_id}' not found",
                {"area_id": area_id},
            )
        return row

    def count(self) -> int:
        return self._db.fetch_one("SELECT COUNT(*) FROM areas")[0]
