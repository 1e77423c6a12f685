"""Journal entry row operations.

IMPORT CONVENTION:
- Database exposes these through the db.journal property

Entries are numbered per plant. Several entries can share a display date,
so "most recent" always means highest seq, never latest date.
"""

from typing import TYPE_CHECKING

import sqlite3

from . import query

if TYPE_CHECKING:
    from . import Database


class JournalOperations:
    """Row-level primitives for the journal_entries table."""

    def __init__(self, db: "Database"):
        self._db = db

    def insert(self, entry_id: str, plant_id: str, date: str, text: str, type: str) -> None:
        """Append an entry to a plant's journal.

        Raises:
            sqlite3.IntegrityError: If entry_id exists or plant_id does not
        """
        self._db.execute(
            """INSERT INTO journal_entries (id, plant_id, date, text, type, seq)
               VALUES (?, ?, ?, ?, ?,
                       (SELECT COALESCE(MAX(seq), 0) + 1 FROM journal_entries WHERE plant_id = ?))""",
            (entry_id, plant_id, date, text, type, plant_id),
        )

    def delete(self, entry_id: str) -> bool:
        cursor = self._db.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
        return cursor.rowcount > 0

    def delete_last_of_type(self, plant_id: str, type: str) -> bool:
        """Delete the most recently inserted entry of one type for a plant.

        Returns:
            True if an entry was deleted, False if the plant had none
        """
        cursor = self._db.execute(
            """DELETE FROM journal_entries
               WHERE id = (
                   SELECT id FROM journal_entries
                   WHERE plant_id = ? AND type = ?
                   ORDER BY seq DESC
                   LIMIT 1
               )""",
            (plant_id, type),
        )
        return cursor.rowcount > 0

    def list_by_plant(self, plant_id: str) -> list[sqlite3.Row]:
        """Entries of one plant in insertion order."""
        return self._db.fetch_all(
            "SELECT * FROM journal_entries WHERE plant_id = ? ORDER BY seq ASC",
            (plant_id,),
        )

    def count(self, plant_id: str | None = None, type: str | None = None) -> int:
        """Count entries, optionally filtered by plant and/or type."""
        where, params = query.build_where_clause({"plant_id": plant_id, "type": type})
        row = self._db.fetch_one(f"SELECT COUNT(*) FROM journal_entries WHERE {where}", params)
        return row[0]
