"""Settings store: user preferences kept in one key-value entry.

The whole Preferences record is serialized as JSON under SETTINGS_KEY.
Loading merges the stored record over the defaults field by field, so a
field added in a later version reads as its default on an older install.
Updates follow the same optimistic pattern as the garden store: memory
first, the durable write in the background.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from concurrent.futures import Future
from dataclasses import replace
from typing import Any, Callable

from . import access
from .exceptions import SeedbedError, ValidationError
from .models import Preferences
from .store import Database
from .writer import BackgroundWriter

logger = logging.getLogger(__name__)

SETTINGS_KEY = "garden_settings"

Listener = Callable[[Preferences], None]


class SettingsStore:
    """In-memory preferences with background persistence."""

    def __init__(self, database: Database, writer: BackgroundWriter | None = None):
        self._db = database
        self._owns_writer = writer is None
        self._writer = writer or BackgroundWriter()
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._preferences = Preferences()

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(preferences) after every change.

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

    def _set(self, preferences: Preferences) -> None:
        with self._lock:
            self._preferences = preferences
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(preferences)
            except Exception:
                logger.exception("Settings listener raised")

    def load(self) -> Preferences:
        """Read stored preferences, merged over the defaults.

        A missing, unreadable or corrupt record leaves the defaults in place.
        """
        try:
            raw = access.kv_get(self._db, SETTINGS_KEY)
        except (SeedbedError, sqlite3.Error) as e:
            logger.error("Could not load settings, using defaults: %s", e)
            raw = None

        stored = None
        if raw:
            try:
                stored = json.loads(raw)
            except ValueError as e:
                logger.warning("Ignoring corrupt settings record: %s", e)
            else:
                if not isinstance(stored, dict):
                    logger.warning("Ignoring settings record that is not an object")
                    stored = None

        self._set(Preferences.from_stored(stored))
        return self._preferences

    def update(self, **patch: Any) -> Future:
        """Merge patch into the preferences and persist the whole record.

        Raises:
            ValidationError: If patch names a field Preferences does not have,
                or sets any field to None

        Returns:
            Future of the background write
        """
        unknown = set(patch) - Preferences.field_names()
        if unknown:
            raise ValidationError(
                f"Unknown settings: {sorted(unknown)}",
                {"unknown": sorted(unknown), "allowed": sorted(Preferences.field_names())},
            )
        nulls = sorted(k for k, v in patch.items() if v is None)
        if nulls:
            raise ValidationError(f"Settings cannot be null: {nulls}", {"null": nulls})

        preferences = replace(self._preferences, **patch)
        self._set(preferences)
        return self._writer.submit(
            "kv_set", access.kv_set, self._db, SETTINGS_KEY, json.dumps(preferences.to_stored())
        )

    def flush(self, timeout: float | None = None) -> bool:
        return self._writer.flush(timeout)

    def close(self) -> None:
        self._writer.flush()
        if self._owns_writer:
            self._writer.shutdown()
