"""Tests for the data access functions (seedbed.access).

Coverage:
- Round-trip of nested areas / plants / journal entries
- Custom catalog boolean and array coercion
- delete_last_stage_entry
- insert_area_with_plant atomicity
- Key-value pass-through
"""

import sqlite3

import pytest

from seedbed import access
from seedbed.models import (
    Area,
    CustomCatalogEntry,
    EntryType,
    JournalEntry,
    Plant,
    Stage,
)


def make_plant(plant_id, title="Lettuce", stage=None, journal=()):
    return Plant(
        id=plant_id,
        seed_id="c1",
        seed_title=title,
        seed_category="Vegetable",
        seed_image=None,
        planted_date="2026-10-16",
        stage=stage,
        journal=journal,
    )


def store_area(db, area):
    """Write an area with everything nested in it."""
    access.insert_area(db, area)
    for plant in area.plants:
        access.insert_plant(db, area.id, plant)
        for entry in plant.journal:
            access.insert_journal_entry(db, plant.id, entry)


# ============================================================================
# Round-trip
# ============================================================================

class TestRoundTrip:
    """Writing then loading reproduces the garden exactly."""

    def test_nested_round_trip(self, db):
        """Field values, nesting and order all survive."""
        planted = JournalEntry("j1", "16 Oct 2026", "🌰 Marked as Planted", EntryType.STAGE)
        note = JournalEntry("j2", "16 Oct 2026", "Watered", EntryType.NOTE)
        areas = [
            Area(
                id="a1",
                name="Planter Box 1",
                emoji="🪴",
                created_at="2026-10-16",
                plants=(
                    make_plant("p1", "Lettuce", Stage.PLANTED, (planted, note)),
                    make_plant("p2", "Radish"),
                ),
            ),
            Area(id="a2", name="Pots", emoji="🌻", created_at="2026-10-17"),
        ]
        for area in areas:
            store_area(db, area)

        assert access.load_all_areas(db) == areas

    def test_empty_database_loads_nothing(self, db):
        assert access.load_all_areas(db) == []
        assert access.load_all_custom_catalog_entries(db) == []

    def test_stage_loads_as_enum(self, db):
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (make_plant("p1"),)))
        access.update_plant_stage(db, "p1", "harvesting")

        plant = access.load_all_areas(db)[0].plants[0]
        assert plant.stage is Stage.HARVESTING

    def test_stage_can_be_cleared(self, db):
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (make_plant("p1", stage=Stage.DONE),)))
        access.update_plant_stage(db, "p1", None)

        assert access.load_all_areas(db)[0].plants[0].stage is None

    def test_update_area_keeps_emoji(self, db):
        store_area(db, Area("a1", "Bed", "🌻", "2026-10-16"))
        access.update_area(db, "a1", "Raised Bed")

        area = access.load_all_areas(db)[0]
        assert area.name == "Raised Bed"
        assert area.emoji == "🌻"


# ============================================================================
# Deletes
# ============================================================================

class TestDeletes:

    def test_delete_area_cascades(self, db):
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (
            make_plant("p1", journal=(JournalEntry("j1", "16 Oct 2026", "hi"),)),
        )))

        assert access.delete_area(db, "a1") is True
        assert access.load_all_areas(db) == []
        assert db.plants.count() == 0
        assert db.journal.count() == 0

    def test_delete_plant_keeps_siblings(self, db):
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (make_plant("p1"), make_plant("p2"))))

        access.delete_plant(db, "p1")

        assert [p.id for p in access.load_all_areas(db)[0].plants] == ["p2"]

    def test_delete_journal_entry(self, db):
        entries = (
            JournalEntry("j1", "16 Oct 2026", "one"),
            JournalEntry("j2", "16 Oct 2026", "two"),
        )
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (make_plant("p1", journal=entries),)))

        assert access.delete_journal_entry(db, "j1") is True
        assert access.load_all_areas(db)[0].plants[0].journal == entries[1:]


class TestDeleteLastStageEntry:
    """Tests for delete_last_stage_entry()."""

    def test_removes_latest_stage_entry_only(self, db):
        journal = (
            JournalEntry("s1", "16 Oct 2026", "🌰 Marked as Planted", EntryType.STAGE),
            JournalEntry("s2", "16 Oct 2026", "🌱 Marked as Sprouted", EntryType.STAGE),
            JournalEntry("n1", "16 Oct 2026", "Looking good", EntryType.NOTE),
        )
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (make_plant("p1", journal=journal),)))

        assert access.delete_last_stage_entry(db, "p1") is True

        loaded = access.load_all_areas(db)[0].plants[0].journal
        assert [e.id for e in loaded] == ["s1", "n1"]

    def test_no_stage_entries_is_noop(self, db):
        journal = (JournalEntry("n1", "16 Oct 2026", "note"),)
        store_area(db, Area("a1", "Bed", "🪴", "2026-10-16", (make_plant("p1", journal=journal),)))

        assert access.delete_last_stage_entry(db, "p1") is False
        assert access.load_all_areas(db)[0].plants[0].journal == journal


# ============================================================================
# Composite insert
# ============================================================================

class TestInsertAreaWithPlant:
    """insert_area_with_plant() writes both rows or neither."""

    def test_inserts_both(self, db):
        area = Area("a1", "Planter Box 1", "🪴", "2026-10-16")
        plant = make_plant("p1")

        access.insert_area_with_plant(db, area, plant)

        assert access.load_all_areas(db) == [Area("a1", "Planter Box 1", "🪴", "2026-10-16", (plant,))]

    def test_failed_plant_insert_leaves_no_area(self, db):
        """A duplicate plant id rolls back the area insert too."""
        access.insert_area_with_plant(db, Area("a1", "One", "🪴", "2026-10-16"), make_plant("p1"))

        with pytest.raises(sqlite3.IntegrityError):
            access.insert_area_with_plant(db, Area("a2", "Two", "🪴", "2026-10-16"), make_plant("p1"))

        assert [a.id for a in access.load_all_areas(db)] == ["a1"]

    def test_failed_area_insert_leaves_no_plant(self, db):
        access.insert_area_with_plant(db, Area("a1", "One", "🪴", "2026-10-16"), make_plant("p1"))

        with pytest.raises(sqlite3.IntegrityError):
            access.insert_area_with_plant(db, Area("a1", "Dup", "🪴", "2026-10-16"), make_plant("p2"))

        assert db.plants.count() == 1
        assert db.plants.get_by_id("p2") is None


# ============================================================================
# Custom catalog
# ============================================================================

class TestCustomCatalog:
    """Custom catalog coercions: tuples <-> JSON, bools <-> 0/1."""

    def test_round_trip_with_flags_and_seasons(self, db):
        entry = CustomCatalogEntry(
            id="custom_1",
            title="Climbing Bean",
            category="Legume",
            scientific_name="Phaseolus vulgaris",
            planting_seasons=("Spring", "Summer"),
            suitable_for_containers=True,
            requires_trellis=True,
            drought_tolerant=False,
            days_to_harvest="60-70",
        )
        access.insert_custom_catalog_entry(db, entry)

        assert access.load_all_custom_catalog_entries(db) == [entry]

    def test_flags_stored_as_integers(self, db):
        access.insert_custom_catalog_entry(
            db, CustomCatalogEntry(id="custom_1", title="Kale", requires_trellis=True)
        )

        row = db.catalog.list_all()[0]
        assert row["requires_trellis"] == 1
        assert row["suitable_for_containers"] == 0
        assert row["planting_seasons"] == "[]"

    def test_empty_seasons_round_trip(self, db):
        entry = CustomCatalogEntry(id="custom_1", title="Kale")
        access.insert_custom_catalog_entry(db, entry)

        assert access.load_all_custom_catalog_entries(db)[0].planting_seasons == ()

    def test_null_seasons_load_as_empty(self, db):
        db.catalog.insert({
            "id": "custom_1",
            "title": "Kale",
            "category": "Vegetable",
            "suitable_for_containers": 0,
            "requires_trellis": 0,
            "drought_tolerant": 0,
            "is_custom": 1,
        })

        assert access.load_all_custom_catalog_entries(db)[0].planting_seasons == ()

    def test_non_array_seasons_raise_value_error(self, db):
        db.catalog.insert({
            "id": "custom_1",
            "title": "Kale",
            "category": "Vegetable",
            "planting_seasons": "5",
            "suitable_for_containers": 0,
            "requires_trellis": 0,
            "drought_tolerant": 0,
            "is_custom": 1,
        })

        with pytest.raises(ValueError, match="JSON array"):
            access.load_all_custom_catalog_entries(db)

    def test_always_stored_as_custom(self, db):
        access.insert_custom_catalog_entry(
            db, CustomCatalogEntry(id="custom_1", title="Kale", is_custom=False)
        )

        assert access.load_all_custom_catalog_entries(db)[0].is_custom is True

    def test_insertion_order(self, db):
        for n, title in enumerate(["Zucchini", "Arugula", "Mint"]):
            access.insert_custom_catalog_entry(db, CustomCatalogEntry(id=f"custom_{n}", title=title))

        titles = [e.title for e in access.load_all_custom_catalog_entries(db)]
        assert titles == ["Zucchini", "Arugula", "Mint"]


# ============================================================================
# Key-value
# ============================================================================

class TestKeyValue:

    def test_pass_through(self, db):
        access.kv_set(db, "weather_alert_date", "2026-10-16")

        assert access.kv_get(db, "weather_alert_date") == "2026-10-16"
        assert access.kv_remove(db, "weather_alert_date") is True
        assert access.kv_get(db, "weather_alert_date") is None
