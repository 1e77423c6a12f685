"""Domain dataclasses for the garden.

All records are frozen; nested collections are tuples. Updating a record
means building a new one with dataclasses.replace(), so a snapshot handed
out by the garden store never changes underneath its reader.
"""

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping

from .exceptions import ValidationError

# Constants
DEFAULT_EMOJI = "🪴"
DEFAULT_CUSTOM_CATEGORY = "Vegetable"
DEFAULT_FREEHAND_CATEGORY = "Other"
CUSTOM_ID_PREFIX = "custom_"


def generate_id() -> str:
    """Generate a new row id."""
    return uuid_lib.uuid4().hex


def generate_custom_id() -> str:
    """Generate a catalog id that cannot collide with built-in catalog ids."""
    return f"{CUSTOM_ID_PREFIX}{generate_id()}"


# ============================================================================
# GROWTH STAGES
# ============================================================================

class Stage(str, Enum):
    """Growth lifecycle of a plant. None stands for 'not started'."""

    PLANTED = "planted"
    SPROUTED = "sprouted"
    GROWING = "growing"
    HARVESTING = "harvesting"
    DONE = "done"


STAGE_ORDER: tuple[Stage, ...] = (
    Stage.PLANTED,
    Stage.SPROUTED,
    Stage.GROWING,
    Stage.HARVESTING,
    Stage.DONE,
)

STAGE_LABELS: dict[Stage, str] = {
    Stage.PLANTED: "🌰 Marked as Planted",
    Stage.SPROUTED: "🌱 Marked as Sprouted",
    Stage.GROWING: "🌿 Marked as Growing",
    Stage.HARVESTING: "🥬 Marked as Harvesting",
    Stage.DONE: "✅ Marked as Done",
}


def parse_stage(value: Stage | str | None) -> Stage | None:
    """Coerce a stored or user-supplied stage value.

    Args:
        value: Stage, stage name, or None for 'not started'

    Returns:
        Stage member or None

    Raises:
        ValidationError: If value is not a lifecycle stage name
    """
    if value is None or isinstance(value, Stage):
        return value
    try:
        return Stage(value)
    except ValueError:
        raise ValidationError(
            f"Unknown stage: {value!r}",
            {"stage": value, "allowed": [s.value for s in STAGE_ORDER]},
        ) from None


def next_stage(stage: Stage | None) -> Stage | None:
    """Stage after `stage`, or None when `stage` is DONE."""
    if stage is None:
        return STAGE_ORDER[0]
    index = STAGE_ORDER.index(stage)
    if index + 1 >= len(STAGE_ORDER):
        return None
    return STAGE_ORDER[index + 1]


def previous_stage(stage: Stage | None) -> Stage | None:
    """Stage before `stage`; PLANTED and not-started both go back to None."""
    if stage is None:
        return None
    index = STAGE_ORDER.index(stage)
    if index == 0:
        return None
    return STAGE_ORDER[index - 1]


def stage_label(stage: Stage) -> str:
    return STAGE_LABELS.get(stage, stage.value)


# ============================================================================
# GARDEN RECORDS
# ============================================================================

class EntryType(str, Enum):
    """Journal entry origin."""

    STAGE = "stage"  # system-generated, one per stage advance
    NOTE = "note"  # user-authored


@dataclass(frozen=True)
class JournalEntry:
    """A dated line in a plant's journal."""
    id: str
    date: str  # display date, e.g. '16 Oct 2026'
    text: str
    type: EntryType = EntryType.NOTE


@dataclass(frozen=True)
class Plant:
    """One thing growing in an area.

    The seed_* fields are copied from the catalog when the plant is added so
    the plant keeps displaying correctly if the catalog entry changes later.
    """
    id: str
    seed_id: str | None
    seed_title: str | None
    seed_category: str | None
    seed_image: str | None
    planted_date: str  # ISO date
    stage: Stage | None = None
    journal: tuple[JournalEntry, ...] = ()

    @property
    def stage_entry_count(self) -> int:
        return sum(1 for e in self.journal if e.type == EntryType.STAGE)


@dataclass(frozen=True)
class Area:
    """A user-named container of plants (bed, planter box, pot...)."""
    id: str
    name: str
    emoji: str
    created_at: str  # ISO date
    plants: tuple[Plant, ...] = ()

    def find_plant(self, plant_id: str) -> Plant | None:
        for plant in self.plants:
            if plant.id == plant_id:
                return plant
        return None


@dataclass(frozen=True)
class CustomCatalogEntry:
    """A user-submitted catalog record, persisted alongside the built-in catalog."""
    id: str
    title: str
    category: str = DEFAULT_CUSTOM_CATEGORY
    scientific_name: str | None = None
    description: str | None = None
    image_url: str | None = None
    planting_seasons: tuple[str, ...] = ()
    best_months: str | None = None
    sun_requirements: str | None = None
    watering: str | None = None
    frost_tolerance: str | None = None
    difficulty: str | None = None
    plant_life: str | None = None
    suitable_for_containers: bool = False
    requires_trellis: bool = False
    days_to_germination: str | None = None
    days_to_harvest: str | None = None
    sowing_depth: str | None = None
    spacing: str | None = None
    companion_plants: str | None = None
    plant_height: str | None = None
    drought_tolerant: bool = False
    is_custom: bool = True

    def as_catalog_record(self) -> dict[str, Any]:
        """Render in the same key shape as a built-in catalog record."""
        record = {f.name: getattr(self, f.name) for f in fields(self)}
        record["planting_seasons"] = list(self.planting_seasons)
        record["url"] = None
        return record


# ============================================================================
# PREFERENCES
# ============================================================================

@dataclass(frozen=True)
class Preferences:
    """User preferences backed by one key in the key-value store."""
    reminders_enabled: bool = False
    reminder_hour: int = 8
    reminder_minute: int = 0

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_stored(cls, stored: Mapping[str, Any] | None) -> Preferences:
        """Merge a stored record over the defaults.

        Missing fields take their default; keys this version doesn't know
        about are dropped.
        """
        if not stored:
            return cls()
        known = cls.field_names()
        return cls(**{k: v for k, v in stored.items() if k in known and v is not None})

    def to_stored(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
