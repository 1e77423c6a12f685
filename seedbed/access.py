"""Data access functions: row shape <-> domain shape.

Rows are flat with snake_case columns, booleans as 0/1 and arrays as JSON
text. Domain records (seedbed.models) are nested frozen dataclasses with
real booleans and tuples. Every function here does exactly one entity
operation plus the coercions it needs:

- tuple -> JSON text on write, JSON text -> tuple on read
- bool -> 0/1 on write, 0/1 -> bool on read
- absent optional values written as NULL

Loading is hierarchical (areas, then plants per area, then journal per
plant) rather than one join, which would repeat every area and plant column
once per journal row.

All functions take the Database first and raise whatever it raises;
retrying or ignoring failures is the caller's decision.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from .models import (
    Area,
    CustomCatalogEntry,
    EntryType,
    JournalEntry,
    Plant,
    Stage,
    parse_stage,
)
from .store import Database

# ============================================================================
# ROW <-> DOMAIN
# ============================================================================


def _journal_from_row(row: sqlite3.Row) -> JournalEntry:
    return JournalEntry(
        id=row["id"],
        date=row["date"],
        text=row["text"],
        type=EntryType(row["type"]),
    )


def _plant_from_row(row: sqlite3.Row, journal: tuple[JournalEntry, ...]) -> Plant:
    return Plant(
        id=row["id"],
        seed_id=row["seed_id"],
        seed_title=row["seed_title"],
        seed_category=row["seed_category"],
        seed_image=row["seed_image"],
        planted_date=row["planted_date"],
        stage=parse_stage(row["stage"]),
        journal=journal,
    )


def _area_from_row(row: sqlite3.Row, plants: tuple[Plant, ...]) -> Area:
    return Area(
        id=row["id"],
        name=row["name"],
        emoji=row["emoji"],
        created_at=row["created_at"],
        plants=plants,
    )


def _load_seasons(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    seasons = json.loads(raw)
    if not isinstance(seasons, list):
        raise ValueError(f"planting_seasons must be a JSON array, got {raw!r}")
    return tuple(str(season) for season in seasons)


def catalog_entry_from_row(row: sqlite3.Row) -> CustomCatalogEntry:
    """Build a CustomCatalogEntry from a custom_catalog_entries row."""
    return CustomCatalogEntry(
        id=row["id"],
        title=row["title"],
        category=row["category"],
        scientific_name=row["scientific_name"],
        description=row["description"],
        image_url=row["image_url"],
        planting_seasons=_load_seasons(row["planting_seasons"]),
        best_months=row["best_months"],
        sun_requirements=row["sun_requirements"],
        watering=row["watering"],
        frost_tolerance=row["frost_tolerance"],
        difficulty=row["difficulty"],
        plant_life=row["plant_life"],
        suitable_for_containers=row["suitable_for_containers"] == 1,
        requires_trellis=row["requires_trellis"] == 1,
        days_to_germination=row["days_to_germination"],
        days_to_harvest=row["days_to_harvest"],
        sowing_depth=row["sowing_depth"],
        spacing=row["spacing"],
        companion_plants=row["companion_plants"],
        plant_height=row["plant_height"],
        drought_tolerant=row["drought_tolerant"] == 1,
        is_custom=row["is_custom"] == 1,
    )


def catalog_entry_to_row(entry: CustomCatalogEntry) -> dict[str, Any]:
    """Flatten a CustomCatalogEntry into custom_catalog_entries columns."""
    return {
        "id": entry.id,
        "title": entry.title,
        "category": entry.category,
        "scientific_name": entry.scientific_name,
        "description": entry.description,
        "image_url": entry.image_url,
        "planting_seasons": json.dumps(list(entry.planting_seasons)),
        "best_months": entry.best_months,
        "sun_requirements": entry.sun_requirements,
        "watering": entry.watering,
        "frost_tolerance": entry.frost_tolerance,
        "difficulty": entry.difficulty,
        "plant_life": entry.plant_life,
        "suitable_for_containers": 1 if entry.suitable_for_containers else 0,
        "requires_trellis": 1 if entry.requires_trellis else 0,
        "days_to_germination": entry.days_to_germination,
        "days_to_harvest": entry.days_to_harvest,
        "sowing_depth": entry.sowing_depth,
        "spacing": entry.spacing,
        "companion_plants": entry.companion_plants,
        "plant_height": entry.plant_height,
        "drought_tolerant": 1 if entry.drought_tolerant else 0,
        # User-added entries are always custom
        "is_custom": 1,
    }


def _stage_value(stage: Stage | str | None) -> str | None:
    stage = parse_stage(stage)
    return stage.value if stage is not None else None


# ============================================================================
# BULK LOAD
# ============================================================================


def load_all_areas(db: Database) -> list[Area]:
    """Load every area with its plants, and every plant with its journal.

    Returns:
        Areas in insertion order; plants and journal entries nested in
        insertion order within their parent
    """
    areas = []
    for area_row in db.areas.list_all():
        plants = []
        for plant_row in db.plants.list_by_area(area_row["id"]):
            journal = tuple(
                _journal_from_row(entry_row)
                for entry_row in db.journal.list_by_plant(plant_row["id"])
            )
            plants.append(_plant_from_row(plant_row, journal))
        areas.append(_area_from_row(area_row, tuple(plants)))
    return areas


def load_all_custom_catalog_entries(db: Database) -> list[CustomCatalogEntry]:
    """Load every custom catalog entry in insertion order."""
    return [catalog_entry_from_row(row) for row in db.catalog.list_all()]


# ============================================================================
# AREAS
# ============================================================================


def insert_area(db: Database, area: Area) -> None:
    db.areas.insert(area.id, area.name, area.emoji, area.created_at)


def update_area(db: Database, area_id: str, name: str, emoji: str | None = None) -> bool:
    """Rename an area; the stored emoji is kept when emoji is None."""
    return db.areas.update(area_id, name, emoji)


def delete_area(db: Database, area_id: str) -> bool:
    """Delete an area. Plants and journal entries go with it by cascade."""
    return db.areas.delete(area_id)


# ============================================================================
# PLANTS
# ============================================================================


def insert_plant(db: Database, area_id: str, plant: Plant) -> None:
    """Insert a plant row. The journal is not written; it starts empty."""
    db.plants.insert(
        plant.id,
        area_id,
        plant.seed_id,
        plant.seed_title,
        plant.seed_category,
        plant.seed_image,
        plant.planted_date,
        _stage_value(plant.stage),
    )


def update_plant_stage(db: Database, plant_id: str, stage: Stage | str | None) -> bool:
    return db.plants.update_stage(plant_id, _stage_value(stage))


def delete_plant(db: Database, plant_id: str) -> bool:
    """Delete a plant. Its journal entries go with it by cascade."""
    return db.plants.delete(plant_id)


def insert_area_with_plant(db: Database, area: Area, plant: Plant) -> None:
    """Insert an area and its first plant in one transaction.

    Either both rows are committed or neither is; there is never a stored
    area missing the plant it was created for.
    """
    with db.transaction():
        insert_area(db, area)
        insert_plant(db, area.id, plant)


# ============================================================================
# JOURNAL
# ============================================================================


def insert_journal_entry(db: Database, plant_id: str, entry: JournalEntry) -> None:
    db.journal.insert(entry.id, plant_id, entry.date, entry.text, EntryType(entry.type).value)


def delete_journal_entry(db: Database, entry_id: str) -> bool:
    return db.journal.delete(entry_id)


def delete_last_stage_entry(db: Database, plant_id: str) -> bool:
    """Delete the most recently inserted 'stage' entry of a plant.

    "Most recent" is by insertion order, not date: several entries can share
    a date. No-op (returns False) when the plant has no stage entries.
    """
    return db.journal.delete_last_of_type(plant_id, EntryType.STAGE.value)


# ============================================================================
# CUSTOM CATALOG
# ============================================================================


def insert_custom_catalog_entry(db: Database, entry: CustomCatalogEntry) -> None:
    db.catalog.insert(catalog_entry_to_row(entry))


# ============================================================================
# KEY-VALUE
# ============================================================================


def kv_get(db: Database, key: str) -> str | None:
    return db.kv.get(key)


def kv_set(db: Database, key: str, value: str | None) -> None:
    db.kv.set(key, value)


def kv_remove(db: Database, key: str) -> bool:
    return db.kv.remove(key)
