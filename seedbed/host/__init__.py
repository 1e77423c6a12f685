"""Host interface for Seedbed.

Provides abstractions for host platform operations (filesystem, environment,
time, logging) so the garden layer never reaches for them directly.
"""

from .filesystem import ensure_dir
from .environment import get_env, get_db_path
from .logs import configure_logging
from .time import today_iso, display_date

__all__ = [
    "ensure_dir",
    "get_env",
    "get_db_path",
    "configure_logging",
    "today_iso",
    "display_date",
]
