"""Key-value sub-store.

A single kv_store table holds small opaque values: the settings record, and
whatever keys outside collaborators need (a scheduled notification id, the
date of the last weather alert). The store attaches no meaning to keys or
values beyond storing text.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from . import Database


class KeyValueOperations:
    """get/set/remove over the kv_store table."""

    def __init__(self, db: "Database"):
        self._db = db

    def get(self, key: str) -> str | None:
        """Get the value stored under key, or None if absent."""
        row = self._db.fetch_one("SELECT value FROM kv_store WHERE key = ?", (key,))
        return row["value"] if row else None

    def set(self, key: str, value: str | None) -> None:
        """Store value under key, replacing any existing value (upsert)."""
        self._db.execute(
            """INSERT INTO kv_store (key, value) VALUES (?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
            (key, value),
        )

    def remove(self, key: str) -> bool:
        """Remove key. Returns True if it existed."""
        cursor = self._db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        return [row["key"] for row in self._db.fetch_all("SELECT key FROM kv_store ORDER BY key")]
