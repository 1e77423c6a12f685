"""Garden store: the in-memory source of truth for areas, plants and custom seeds.

ARCHITECTURE:
- One GardenStore is constructed at startup and passed to whatever needs it
- State is a set of immutable snapshots (tuples of frozen dataclasses);
  every mutation builds new snapshots and swaps them in under a lock
- Listeners registered with subscribe() are called once per state change

OPTIMISTIC DUAL-WRITE:
Every mutation does two things:
1. Replaces the in-memory state immediately, before returning
2. Hands the matching seedbed.access write to the BackgroundWriter

The caller never waits for (2). Mutations that have no natural return value
return the write's Future so a caller that cares can observe the outcome;
mutations that create something return the created record. A failed write
is logged and recorded by the writer; it never raises here.

NO-OPS:
Empty names and notes (after stripping) and unknown area/plant/entry ids
change nothing and dispatch nothing; the mutation returns None.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from concurrent.futures import Future
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Mapping

from . import access
from .consistency import SystemStatus, check_consistency
from .exceptions import ResourceNotFound, SeedbedError, ValidationError
from .host.time import display_date, today, today_iso
from .models import (
    DEFAULT_CUSTOM_CATEGORY,
    DEFAULT_EMOJI,
    DEFAULT_FREEHAND_CATEGORY,
    Area,
    CustomCatalogEntry,
    EntryType,
    JournalEntry,
    Plant,
    Stage,
    generate_custom_id,
    generate_id,
    next_stage,
    parse_stage,
    previous_stage,
    stage_label,
)
from .store import Database
from .writer import BackgroundWriter, combine

logger = logging.getLogger(__name__)

Listener = Callable[["GardenStore"], None]
CatalogItem = Mapping[str, Any] | CustomCatalogEntry


def _clean(value: str | None) -> str | None:
    """Strip a free-text field; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class GardenStore:
    """Authoritative garden state with background persistence.

    Args:
        database: Durable store the garden is persisted to
        writer: Background writer; one is created (and owned) if omitted
        clock: Callable returning today's date, for planting and journal dates
    """

    def __init__(
        self,
        database: Database,
        writer: BackgroundWriter | None = None,
        clock: Callable[[], date] | None = None,
    ):
        self._db = database
        self._owns_writer = writer is None
        self._writer = writer or BackgroundWriter()
        self._clock = clock or today
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

        self._areas: tuple[Area, ...] = ()
        self._custom_entries: tuple[CustomCatalogEntry, ...] = ()
        self._loading = True
        self._status = SystemStatus.NORMAL

    # ==========================================================================
    # READ SIDE
    # ==========================================================================

    @property
    def areas(self) -> tuple[Area, ...]:
        return self._areas

    @property
    def custom_entries(self) -> tuple[CustomCatalogEntry, ...]:
        return self._custom_entries

    @property
    def total_plants(self) -> int:
        """Number of plants across all areas, computed from current state."""
        return sum(len(area.plants) for area in self._areas)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def status(self) -> SystemStatus:
        return self._status

    @property
    def writer(self) -> BackgroundWriter:
        return self._writer

    def get_area(self, area_id: str) -> Area:
        """Get an area by id.

        Raises:
            ResourceNotFound: If no area has this id
        """
        for area in self._areas:
            if area.id == area_id:
                return area
        raise ResourceNotFound(f"Area not found: {area_id}", {"area_id": area_id})

    def get_plant(self, area_id: str, plant_id: str) -> Plant:
        """Get a plant by area and plant id.

        Raises:
            ResourceNotFound: If the area or the plant does not exist
        """
        plant = self.get_area(area_id).find_plant(plant_id)
        if plant is None:
            raise ResourceNotFound(
                f"Plant not found: {plant_id}", {"area_id": area_id, "plant_id": plant_id}
            )
        return plant

    def _find_plant(self, area_id: str, plant_id: str) -> Plant | None:
        try:
            return self.get_plant(area_id, plant_id)
        except ResourceNotFound:
            return None

    # ==========================================================================
    # LISTENERS
    # ==========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(store) after every state change.

        Returns:
            A function that unsubscribes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Garden listener raised")

    # ==========================================================================
    # STATE TRANSITIONS
    # ==========================================================================

    def _set_areas(self, areas: tuple[Area, ...]) -> None:
        with self._lock:
            self._areas = areas
        self._notify()

    def _update_area(self, area_id: str, change: Callable[[Area], Area]) -> Area | None:
        """Replace one area with change(area). Returns the new area, or None if unknown."""
        with self._lock:
            areas = list(self._areas)
            for index, area in enumerate(areas):
                if area.id == area_id:
                    updated = change(area)
                    areas[index] = updated
                    self._areas = tuple(areas)
                    break
            else:
                return None
        self._notify()
        return updated

    def _update_plant(
        self, area_id: str, plant_id: str, change: Callable[[Plant], Plant | None]
    ) -> Plant | None:
        """Replace one plant with change(plant).

        Returns the new plant, or None if the plant is unknown or change()
        declined by returning None.
        """
        with self._lock:
            plant = self._find_plant(area_id, plant_id)
            if plant is None:
                return None
            updated = change(plant)
            if updated is None:
                return None

            def swap(area: Area) -> Area:
                plants = tuple(updated if p.id == plant_id else p for p in area.plants)
                return replace(area, plants=plants)

            self._update_area(area_id, swap)
        return updated

    def _dispatch(self, operation: str, fn: Callable[..., Any], *args: Any) -> Future:
        return self._writer.submit(operation, fn, self._db, *args)

    # ==========================================================================
    # LOADING
    # ==========================================================================

    def load(self) -> SystemStatus:
        """Replace in-memory state with everything in the durable store.

        On failure the garden starts empty in DEGRADED mode. The loading
        flag is cleared either way.

        Returns:
            The resulting status
        """
        try:
            areas = tuple(access.load_all_areas(self._db))
            custom_entries = tuple(access.load_all_custom_catalog_entries(self._db))
            status = check_consistency(self._db)
        except (SeedbedError, sqlite3.Error, ValueError) as e:
            logger.error("Could not load garden, starting empty: %s", e, exc_info=True)
            areas, custom_entries, status = (), (), SystemStatus.DEGRADED
        else:
            logger.info(
                "Loaded %d areas, %d plants, %d custom catalog entries",
                len(areas),
                sum(len(a.plants) for a in areas),
                len(custom_entries),
            )
        finally:
            with self._lock:
                self._loading = False

        with self._lock:
            self._areas = areas
            self._custom_entries = custom_entries
            self._status = status
        self._notify()
        return status

    # ==========================================================================
    # AREAS
    # ==========================================================================

    def create_area(self, name: str, emoji: str | None = DEFAULT_EMOJI) -> Area | None:
        """Create an empty area and append it to the garden.

        Returns:
            The new area, or None if name is blank
        """
        name = (name or "").strip()
        if not name:
            return None

        area = Area(
            id=generate_id(),
            name=name,
            emoji=emoji or DEFAULT_EMOJI,
            created_at=today_iso(self._clock()),
        )
        with self._lock:
            self._set_areas(self._areas + (area,))
        self._dispatch("insert_area", access.insert_area, area)
        return area

    def rename_area(
        self, area_id: str, new_name: str, new_emoji: str | None = None
    ) -> Future | None:
        """Rename an area, keeping its emoji unless a new one is given."""
        new_name = (new_name or "").strip()
        if not new_name:
            return None

        def rename(area: Area) -> Area:
            return replace(area, name=new_name, emoji=new_emoji or area.emoji)

        if self._update_area(area_id, rename) is None:
            return None
        return self._dispatch(
            "update_area", access.update_area, area_id, new_name, new_emoji or None
        )

    def delete_area(self, area_id: str) -> Future | None:
        """Remove an area with all its plants.

        One durable delete; plants and journal entries go by cascade.
        """
        with self._lock:
            remaining = tuple(a for a in self._areas if a.id != area_id)
            if len(remaining) == len(self._areas):
                return None
            self._set_areas(remaining)
        return self._dispatch("delete_area", access.delete_area, area_id)

    # ==========================================================================
    # PLANTS
    # ==========================================================================

    def _plant_from_catalog(self, catalog_item: CatalogItem) -> Plant:
        """Build a not-started plant, copying display fields from a catalog item.

        Built-in catalog records name the crop under 'name', custom entries
        under 'title'; both are accepted.
        """
        if isinstance(catalog_item, CustomCatalogEntry):
            catalog_item = catalog_item.as_catalog_record()
        return Plant(
            id=generate_id(),
            seed_id=catalog_item.get("id"),
            seed_title=catalog_item.get("title") or catalog_item.get("name"),
            seed_category=catalog_item.get("category"),
            seed_image=catalog_item.get("image_url"),
            planted_date=today_iso(self._clock()),
        )

    def _append_plant(self, area_id: str, plant: Plant) -> bool:
        def append(area: Area) -> Area:
            return replace(area, plants=area.plants + (plant,))

        return self._update_area(area_id, append) is not None

    def add_plant_to_area(self, area_id: str, catalog_item: CatalogItem) -> Plant | None:
        """Add a plant grown from a catalog item to an area.

        Returns:
            The new plant, or None if the area does not exist
        """
        plant = self._plant_from_catalog(catalog_item)
        if not self._append_plant(area_id, plant):
            return None
        self._dispatch("insert_plant", access.insert_plant, area_id, plant)
        return plant

    def create_area_and_add_plant(
        self, name: str, emoji: str | None, catalog_item: CatalogItem
    ) -> Area | None:
        """Create an area that already holds one plant.

        The garden changes once, with the area and its plant together, and
        both rows are written in one transaction.

        Returns:
            The new area (with its plant), or None if name is blank
        """
        name = (name or "").strip()
        if not name:
            return None

        plant = self._plant_from_catalog(catalog_item)
        area = Area(
            id=generate_id(),
            name=name,
            emoji=emoji or DEFAULT_EMOJI,
            created_at=today_iso(self._clock()),
            plants=(plant,),
        )
        with self._lock:
            self._set_areas(self._areas + (area,))
        self._dispatch("insert_area_with_plant", access.insert_area_with_plant, area, plant)
        return area

    def add_custom_plant_to_area(
        self, area_id: str, name: str, category: str | None = None
    ) -> Plant | None:
        """Add a plant typed in by hand, with no catalog entry behind it."""
        name = (name or "").strip()
        if not name:
            return None

        plant = Plant(
            id=generate_id(),
            seed_id=None,
            seed_title=name,
            seed_category=category or DEFAULT_FREEHAND_CATEGORY,
            seed_image=None,
            planted_date=today_iso(self._clock()),
        )
        if not self._append_plant(area_id, plant):
            return None
        self._dispatch("insert_plant", access.insert_plant, area_id, plant)
        return plant

    def remove_plant_from_area(self, area_id: str, plant_id: str) -> Future | None:
        """Remove a plant. Its journal entries go by cascade."""
        with self._lock:
            if self._find_plant(area_id, plant_id) is None:
                return None

            def remove(area: Area) -> Area:
                return replace(area, plants=tuple(p for p in area.plants if p.id != plant_id))

            self._update_area(area_id, remove)
        return self._dispatch("delete_plant", access.delete_plant, plant_id)

    # ==========================================================================
    # STAGES
    # ==========================================================================

    def update_plant_stage(
        self, area_id: str, plant_id: str, new_stage: Stage | str
    ) -> Future | None:
        """Move a plant to new_stage and log it in the journal.

        Only the stage right after the current one is accepted; anything
        else (skipping ahead, repeating a stage, advancing past done) is a
        no-op returning None. Appends exactly one 'stage' entry dated today.
        The stage update and the journal insert are two writes; the
        returned Future completes when both have.

        Raises:
            ValidationError: If new_stage is not a lifecycle stage
        """
        stage = parse_stage(new_stage)
        if stage is None:
            raise ValidationError(
                "A stage is required; use rollback_plant_stage to clear it",
                {"plant_id": plant_id},
            )

        entry = JournalEntry(
            id=generate_id(),
            date=display_date(self._clock()),
            text=stage_label(stage),
            type=EntryType.STAGE,
        )

        def advance(plant: Plant) -> Plant | None:
            if stage != next_stage(plant.stage):
                return None
            return replace(plant, stage=stage, journal=plant.journal + (entry,))

        if self._update_plant(area_id, plant_id, advance) is None:
            return None
        return combine([
            self._dispatch("update_plant_stage", access.update_plant_stage, plant_id, stage),
            self._dispatch("insert_journal_entry", access.insert_journal_entry, plant_id, entry),
        ])

    def rollback_plant_stage(
        self, area_id: str, plant_id: str, previous: Stage | str | None
    ) -> Future | None:
        """Set a plant back to `previous` and drop its latest stage entry.

        `previous` must be the stage right before the current one, or None
        when the plant is planted; otherwise this is a no-op returning None.
        No entry is added; notes are never removed.
        """
        stage = parse_stage(previous)

        def roll_back(plant: Plant) -> Plant | None:
            if plant.stage is None or stage != previous_stage(plant.stage):
                return None
            journal = list(plant.journal)
            for index in range(len(journal) - 1, -1, -1):
                if journal[index].type == EntryType.STAGE:
                    del journal[index]
                    break
            return replace(plant, stage=stage, journal=tuple(journal))

        if self._update_plant(area_id, plant_id, roll_back) is None:
            return None
        return combine([
            self._dispatch("update_plant_stage", access.update_plant_stage, plant_id, stage),
            self._dispatch("delete_last_stage_entry", access.delete_last_stage_entry, plant_id),
        ])

    def advance_plant_stage(self, area_id: str, plant_id: str) -> Future | None:
        """Move a plant to the next stage. No-op once it is done."""
        plant = self._find_plant(area_id, plant_id)
        if plant is None:
            return None
        stage = next_stage(plant.stage)
        if stage is None:
            return None
        return self.update_plant_stage(area_id, plant_id, stage)

    def rollback_to_previous_stage(self, area_id: str, plant_id: str) -> Future | None:
        """Move a plant back one stage. No-op when it has not started."""
        plant = self._find_plant(area_id, plant_id)
        if plant is None or plant.stage is None:
            return None
        return self.rollback_plant_stage(area_id, plant_id, previous_stage(plant.stage))

    # ==========================================================================
    # JOURNAL
    # ==========================================================================

    def add_journal_entry(self, area_id: str, plant_id: str, text: str) -> JournalEntry | None:
        """Append a note dated today to a plant's journal."""
        text = (text or "").strip()
        if not text:
            return None

        entry = JournalEntry(
            id=generate_id(),
            date=display_date(self._clock()),
            text=text,
            type=EntryType.NOTE,
        )

        def append(plant: Plant) -> Plant:
            return replace(plant, journal=plant.journal + (entry,))

        if self._update_plant(area_id, plant_id, append) is None:
            return None
        self._dispatch("insert_journal_entry", access.insert_journal_entry, plant_id, entry)
        return entry

    def remove_journal_entry(self, area_id: str, plant_id: str, entry_id: str) -> Future | None:
        with self._lock:
            plant = self._find_plant(area_id, plant_id)
            if plant is None or not any(e.id == entry_id for e in plant.journal):
                return None

            def remove(p: Plant) -> Plant:
                return replace(p, journal=tuple(e for e in p.journal if e.id != entry_id))

            self._update_plant(area_id, plant_id, remove)
        return self._dispatch("delete_journal_entry", access.delete_journal_entry, entry_id)

    # ==========================================================================
    # CUSTOM CATALOG
    # ==========================================================================

    def add_custom_seed_to_catalog(
        self,
        name: str,
        *,
        category: str | None = None,
        scientific_name: str | None = None,
        description: str | None = None,
        seasons: list[str] | tuple[str, ...] | None = None,
        best_months: str | None = None,
        sun_requirements: str | None = None,
        watering: str | None = None,
        frost_tolerance: str | None = None,
        difficulty: str | None = None,
        plant_life: str | None = None,
        suitable_for_pots: bool = False,
        requires_trellis: bool = False,
        days_to_germination: str | None = None,
        days_to_harvest: str | None = None,
        sowing_depth: str | None = None,
        spacing: str | None = None,
        companion_plants: str | None = None,
    ) -> CustomCatalogEntry | None:
        """Add a user-defined seed to the catalog.

        Blank text fields become None; a missing category becomes
        'Vegetable'. Returns None if name is blank.
        """
        title = _clean(name)
        if title is None:
            return None

        entry = CustomCatalogEntry(
            id=generate_custom_id(),
            title=title,
            category=_clean(category) or DEFAULT_CUSTOM_CATEGORY,
            scientific_name=_clean(scientific_name),
            description=_clean(description),
            image_url=None,
            planting_seasons=tuple(seasons or ()),
            best_months=_clean(best_months),
            sun_requirements=_clean(sun_requirements),
            watering=_clean(watering),
            frost_tolerance=_clean(frost_tolerance),
            difficulty=_clean(difficulty),
            plant_life=_clean(plant_life),
            suitable_for_containers=bool(suitable_for_pots),
            requires_trellis=bool(requires_trellis),
            days_to_germination=_clean(days_to_germination),
            days_to_harvest=_clean(days_to_harvest),
            sowing_depth=_clean(sowing_depth),
            spacing=_clean(spacing),
            companion_plants=_clean(companion_plants),
            plant_height=None,
            drought_tolerant=False,
        )
        with self._lock:
            self._custom_entries = self._custom_entries + (entry,)
        self._notify()
        self._dispatch(
            "insert_custom_catalog_entry", access.insert_custom_catalog_entry, entry
        )
        return entry

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for every dispatched write to finish."""
        return self._writer.flush(timeout)

    def close(self) -> None:
        """Flush pending writes; stop the writer if this store created it."""
        self._writer.flush()
        if self._owns_writer:
            self._writer.shutdown()
