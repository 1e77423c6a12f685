"""Startup consistency check for the garden database.

Foreign keys with ON DELETE CASCADE keep plants and journal entries tied to
their parents, but only while PRAGMA foreign_keys is on. A database written
by a connection that left it off can hold rows whose parent is gone. This
module finds those rows so the garden store can report them.

SYSTEM STATUS MODES:
- NORMAL: No issues detected
- DEGRADED: Database could not be opened or loaded; the session is memory-only
- INCONSISTENT: Orphaned plants or journal entries found

USAGE:
    status = check_consistency(db)
    if status != SystemStatus.NORMAL:
        # Show a warning, keep running
        pass
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .store import Database

logger = logging.getLogger(__name__)


class SystemStatus(Enum):
    """Health of the persistence layer for the current session."""

    NORMAL = "normal"
    DEGRADED = "degraded"
    INCONSISTENT = "inconsistent"


def find_orphaned_plants(db: Database) -> list[dict]:
    """
    Find plants whose area no longer exists.

    Returns:
        List of dicts with id and area_id
    """
    rows = db.fetch_all(
        """SELECT p.id, p.area_id
           FROM plants p
           LEFT JOIN areas a ON a.id = p.area_id
           WHERE a.id IS NULL"""
    )
    return [{"id": row["id"], "area_id": row["area_id"]} for row in rows]


def find_orphaned_journal_entries(db: Database) -> list[dict]:
    """
    Find journal entries whose plant no longer exists.

    Returns:
        List of dicts with id and plant_id
    """
    rows = db.fetch_all(
        """SELECT j.id, j.plant_id
           FROM journal_entries j
           LEFT JOIN plants p ON p.id = j.plant_id
           WHERE p.id IS NULL"""
    )
    return [{"id": row["id"], "plant_id": row["plant_id"]} for row in rows]


def check_consistency(db: Database) -> SystemStatus:
    """
    Check the database for rows whose parent is missing.

    Returns:
        SystemStatus.INCONSISTENT if any orphans exist, else NORMAL

    Note:
        The garden still loads either way; orphans are never shown because
        loading walks down from areas.
    """
    issues = []

    orphaned_plants = find_orphaned_plants(db)
    if orphaned_plants:
        issues.append(f"Found {len(orphaned_plants)} plants with no area")

    orphaned_entries = find_orphaned_journal_entries(db)
    if orphaned_entries:
        issues.append(f"Found {len(orphaned_entries)} journal entries with no plant")

    if issues:
        for issue in issues:
            logger.warning("Consistency check: %s", issue)
        return SystemStatus.INCONSISTENT

    return SystemStatus.NORMAL
