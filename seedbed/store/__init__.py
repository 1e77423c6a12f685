"""Durable store for Seedbed.

This module owns the one SQLite connection the garden is persisted through.

ARCHITECTURE:
- Database owns its connection; it is opened lazily by initialize()
- initialize() is idempotent and safe under concurrent callers: the first
  caller opens and configures the connection, later callers get the same one
- The connection runs in autocommit mode; transaction() groups statements
  into one BEGIN IMMEDIATE ... COMMIT unit
- All statements go through one re-entrant lock, so the background writer
  thread and the caller thread never interleave on the connection
- Each table gets an operations class with its row-level primitives,
  reached through lazy properties (db.areas, db.plants, ...)

ORDERING:
Rows carry an explicit seq column, numbered within the parent scope
(areas and custom catalog entries globally, plants per area, journal
entries per plant). Lists are always read ORDER BY seq.

USAGE:
    >>> db = get_database("garden.db")
    >>> db.areas.insert("a1", "Planter Box 1", "🪴", "2026-10-16")
    >>> with db.transaction():
    ...     db.areas.insert(...)
    ...     db.plants.insert(...)
    ...     # Both rows commit together, or neither does
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, Sequence, TypeVar

from seedbed.exceptions import PersistenceError
from seedbed.host.filesystem import ensure_dir
from seedbed.schemas import get_sql_schema

if TYPE_CHECKING:
    from .areas import AreaOperations
    from .catalog import CustomCatalogOperations
    from .journal import JournalOperations
    from .kv import KeyValueOperations
    from .plants import PlantOperations

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Database:
    """
    Garden database with per-table operations.

    Connection Lifecycle:
    - Opened on first initialize() (or first operation), reused until close()
    - A failed open leaves the database unopened; the next call retries
    """

    def __init__(self, db_path: str | Path):
        """Initialize Database.

        Args:
            db_path: Path to SQLite database file (':memory:' is accepted)

        Note:
            No I/O happens here; the file is opened by initialize().
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._init_lock = threading.Lock()
        self._lock = threading.RLock()
        self._tx_depth = 0
        self._area_ops = None
        self._plant_ops = None
        self._journal_ops = None
        self._catalog_ops = None
        self._kv_ops = None

    # ==========================================================================
    # INITIALIZATION
    # ==========================================================================

    def initialize(self) -> sqlite3.Connection:
        """Open the connection and create the schema, once.

        Returns:
            The shared SQLite connection

        Raises:
            PersistenceError: If the database cannot be opened or configured
        """
        conn = self._conn
        if conn is not None:
            return conn

        with self._init_lock:
            # Another caller may have finished while we waited
            if self._conn is not None:
                return self._conn

            try:
                conn = self._open_connection()
            except (sqlite3.Error, OSError) as e:
                logger.error("Could not open garden database at %s: %s", self.db_path, e)
                raise PersistenceError(
                    f"Could not open garden database: {e}",
                    {"database_path": str(self.db_path)},
                ) from e

            self._conn = conn
            logger.info("Garden database ready at %s", self.db_path)
            return conn

    def _open_connection(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            ensure_dir(self.db_path.parent)
            target = str(self.db_path)
        else:
            target = self.db_path

        # isolation_level=None: autocommit, transactions are explicit
        conn = sqlite3.connect(target, check_same_thread=False, isolation_level=None)
        try:
            conn.row_factory = sqlite3.Row
            # WAL keeps the file intact if the process dies mid-write
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA foreign_keys = ON")
            conn.executescript(get_sql_schema("garden"))
        except Exception:
            conn.close()
            raise
        return conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def get_schema_version(self) -> str | None:
        """Get current schema version."""
        row = self.fetch_one("SELECT value FROM _schema_metadata WHERE key = 'version'")
        return row[0] if row else None

    def close(self):
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ==========================================================================
    # STATEMENT EXECUTION
    # ==========================================================================

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Execute one statement on the shared connection.

        Outside transaction() the statement commits immediately.

        Raises:
            PersistenceError: If the database cannot be opened
            sqlite3.Error: If the statement fails
        """
        conn = self.initialize()
        with self._lock:
            return conn.execute(sql, params)

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        conn = self.initialize()
        with self._lock:
            return conn.execute(sql, params).fetchall()

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        conn = self.initialize()
        with self._lock:
            return conn.execute(sql, params).fetchone()

    # ==========================================================================
    # TRANSACTIONS
    # ==========================================================================

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """Group statements so they commit together or not at all.

        Nested use joins the outermost transaction. The lock is held for the
        whole block, so statements from other threads wait until it ends.

        Yields:
            self

        Raises:
            Whatever the block raises, after rolling back
        """
        conn = self.initialize()
        with self._lock:
            if self._tx_depth > 0:
                self._tx_depth += 1
                try:
                    yield self
                finally:
                    self._tx_depth -= 1
                return

            conn.execute("BEGIN IMMEDIATE")
            self._tx_depth = 1
            try:
                yield self
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            else:
                conn.execute("COMMIT")
            finally:
                self._tx_depth = 0

    def run_in_transaction(self, work: Callable[[Database], T]) -> T:
        """Run work(self) inside transaction() and return its result."""
        with self.transaction():
            return work(self)

    # ==========================================================================
    # TABLE OPERATIONS
    # ==========================================================================

    @property
    def areas(self) -> "AreaOperations":
        """Area row operations (lazy-loaded to avoid circular imports)."""
        if self._area_ops is None:
            from .areas import AreaOperations
            self._area_ops = AreaOperations(self)
        return self._area_ops

    @property
    def plants(self) -> "PlantOperations":
        """Plant row operations."""
        if self._plant_ops is None:
            from .plants import PlantOperations
            self._plant_ops = PlantOperations(self)
        return self._plant_ops

    @property
    def journal(self) -> "JournalOperations":
        """Journal entry row operations."""
        if self._journal_ops is None:
            from .journal import JournalOperations
            self._journal_ops = JournalOperations(self)
        return self._journal_ops

    @property
    def catalog(self) -> "CustomCatalogOperations":
        """Custom catalog entry row operations."""
        if self._catalog_ops is None:
            from .catalog import CustomCatalogOperations
            self._catalog_ops = CustomCatalogOperations(self)
        return self._catalog_ops

    @property
    def kv(self) -> "KeyValueOperations":
        """Key-value sub-store."""
        if self._kv_ops is None:
            from .kv import KeyValueOperations
            self._kv_ops = KeyValueOperations(self)
        return self._kv_ops


# ============================================================================
# PROCESS-WIDE CONNECTIONS
# ============================================================================

_databases: dict[str, Database] = {}
_registry_lock = threading.Lock()


def _registry_key(db_path: str | Path) -> str:
    if db_path == ":memory:":
        return ":memory:"
    return str(Path(db_path).resolve())


def get_database(db_path: str | Path | None = None) -> Database:
    """
    Get the process-wide Database for a path.

    Args:
        db_path: Database file. If None, resolved via get_db_path().

    Returns:
        The same Database instance for every call with the same path

    Examples:
        >>> db = get_database()
        >>> db is get_database()
        True
    """
    if db_path is None:
        from seedbed.host.environment import get_db_path
        db_path = get_db_path()

    key = _registry_key(db_path)
    with _registry_lock:
        database = _databases.get(key)
        if database is None:
            database = Database(db_path)
            _databases[key] = database
        return database


def init_db(db_path: str | Path | None = None) -> Database:
    """Open and set up the process-wide Database for a path.

    Raises:
        PersistenceError: If the database cannot be opened or configured
    """
    database = get_database(db_path)
    database.initialize()
    return database


def reset_databases():
    """Close and forget every process-wide Database."""
    with _registry_lock:
        for database in _databases.values():
            database.close()
        _databases.clear()
