"""Environment variable access and path resolution.

This module provides utilities for resolving the database path and the
per-user directories based on environment variables and default locations.

Path Resolution Order:
1. Explicit database override (SEEDBED_DB)
2. Shared data directory (SEEDBED_DATA_DIR)
3. Current directory (./garden.db)

Directory defaults follow the XDG layout:
- data:   ~/.local/share/seedbed
- config: ~/.config/seedbed
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DB_FILENAME = "garden.db"


@dataclass
class RuntimeContext:
    """Resource locations for one Seedbed installation.

    Attributes:
        data_dir: Directory holding the garden database
        config_dir: Directory holding config.toml
    """
    data_dir: Path
    config_dir: Path

    def get_db_path(self) -> Path:
        """Return the garden database path for this context."""
        return self.data_dir / DB_FILENAME

    def get_config_path(self) -> Path:
        """Return config file path for this context."""
        return self.config_dir / "config.toml"


def resolve_context(config_override: Optional[Path] = None) -> RuntimeContext:
    """Resolve the directories Seedbed reads and writes.

    Args:
        config_override: Optional explicit config path; its parent becomes
            the config directory

    Returns:
        RuntimeContext with env var overrides applied

    Examples:
        >>> ctx = resolve_context()
        >>> ctx.get_config_path()
        Path('~/.config/seedbed/config.toml').expanduser()

        >>> ctx = resolve_context(Path("/custom/config.toml"))
        >>> ctx.config_dir
        Path('/custom')
    """
    data_dir = get_env("SEEDBED_DATA_DIR")
    config_dir = get_env("SEEDBED_CONFIG_DIR")

    if config_override:
        resolved_config_dir = config_override.parent
    elif config_dir:
        resolved_config_dir = Path(config_dir)
    else:
        resolved_config_dir = Path.home() / ".config/seedbed"

    return RuntimeContext(
        data_dir=Path(data_dir) if data_dir else Path.home() / ".local/share/seedbed",
        config_dir=resolved_config_dir,
    )


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable.

    Args:
        key: Environment variable name
        default: Default value if not found

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def get_db_path() -> Path:
    """Resolve the garden database path.

    Resolution order:
    1. SEEDBED_DB (explicit file)
    2. SEEDBED_DATA_DIR/garden.db
    3. ./garden.db

    Returns:
        Path to database file

    Examples:
        >>> os.environ['SEEDBED_DB'] = '/custom/garden.db'
        >>> get_db_path()
        Path('/custom/garden.db')

        >>> os.environ['SEEDBED_DATA_DIR'] = '/data'
        >>> get_db_path()
        Path('/data/garden.db')
    """
    explicit = get_env("SEEDBED_DB")
    if explicit:
        return Path(explicit)

    data_dir = get_env("SEEDBED_DATA_DIR")
    if data_dir:
        return Path(data_dir) / DB_FILENAME

    return Path(f"./{DB_FILENAME}")
