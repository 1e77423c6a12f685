"""Catalog merge: built-in crop records plus the user's custom seeds.

The built-in catalog is a JSON array read once at startup and never
modified. Built-in records name the crop under 'name'; custom entries use
'title'. catalog_title() reads either.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Mapping

if TYPE_CHECKING:
    from .garden import GardenStore

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"

CatalogRecord = Mapping[str, Any]


def load_static_catalog(path: str | Path | None) -> tuple[CatalogRecord, ...]:
    """Read the built-in catalog file.

    Args:
        path: JSON file holding an array of records; None for an empty catalog

    Returns:
        Read-only records in file order

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is not a JSON array of objects
    """
    if path is None:
        return ()

    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ValueError(f"Catalog file must hold a JSON array of objects: {path}")

    logger.info("Loaded %d built-in catalog records from %s", len(data), path)
    return tuple(MappingProxyType(record) for record in data)


def catalog_title(record: CatalogRecord) -> str | None:
    """Display name of a catalog record."""
    return record.get("title") or record.get("name")


class CatalogView:
    """One logical catalog: built-in records first, then custom entries.

    `entries` is rebuilt only when the garden store's custom entries change.
    """

    def __init__(self, static_entries: Iterable[CatalogRecord], garden_store: GardenStore):
        self._static = tuple(static_entries)
        self._garden = garden_store
        self._cached_custom: tuple | None = None
        self._cached_entries: tuple[CatalogRecord, ...] = ()

    @property
    def static_entries(self) -> tuple[CatalogRecord, ...]:
        return self._static

    @property
    def entries(self) -> tuple[CatalogRecord, ...]:
        custom = self._garden.custom_entries
        if custom is not self._cached_custom:
            merged = self._static + tuple(
                MappingProxyType(entry.as_catalog_record()) for entry in custom
            )
            self._cached_entries = merged
            self._cached_custom = custom
        return self._cached_entries

    def categories(self) -> list[str]:
        """Distinct categories in catalog order."""
        seen: dict[str, None] = {}
        for record in self.entries:
            category = record.get("category")
            if category:
                seen.setdefault(category, None)
        return list(seen)


def filter_catalog(
    entries: Iterable[CatalogRecord],
    query: str = "",
    category: str | None = None,
) -> list[CatalogRecord]:
    """Filter catalog records for a search box and category picker.

    Args:
        entries: Records to filter
        query: Case-insensitive substring of the name, scientific name or
               description; blank matches everything
        category: Exact category, or None / 'All' for every category

    Returns:
        Matching records in their original order
    """
    needle = (query or "").strip().lower()
    if category == ALL_CATEGORIES:
        category = None

    results = []
    for record in entries:
        if category is not None and record.get("category") != category:
            continue
        if needle:
            haystack = (
                catalog_title(record),
                record.get("scientific_name"),
                record.get("description"),
            )
            if not any(needle in value.lower() for value in haystack if value):
                continue
        results.append(record)
    return results
