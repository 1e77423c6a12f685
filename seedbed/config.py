"""Configuration management for Seedbed.

Configuration is loaded from a TOML file with environment variable overrides.

Configuration Resolution Order:
1. Environment variables (highest priority)
2. TOML config file
3. Built-in defaults

Example config.toml:

    [storage]
    database_path = "/home/me/.local/share/seedbed/garden.db"

    [logging]
    level = "debug"
    file = "/home/me/.local/state/seedbed/logs/seedbed.log"

    [catalog]
    path = "/home/me/.local/share/seedbed/crops.json"
"""

import os
import sys
from pathlib import Path
from typing import Optional, Any

from seedbed.host.environment import get_db_path, resolve_context

# Python 3.11+ has tomllib in stdlib, otherwise use tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


def load_toml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config.toml file

    Returns:
        Dictionary with configuration sections

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is invalid TOML
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}")


def get_config_path(config_override: Optional[Path] = None) -> Path:
    """Get configuration file path.

    Args:
        config_override: Optional explicit config path

    Returns:
        Path to configuration file (SEEDBED_CONFIG, then the config directory)
    """
    if config_override:
        return config_override

    env_path = os.environ.get("SEEDBED_CONFIG")
    if env_path:
        return Path(env_path)

    return resolve_context().get_config_path()


class Settings:
    """Seedbed settings with TOML configuration support.

    Database Path Resolution:
    - If database_path is given, it is used directly
    - Otherwise SEEDBED_DB, then [storage] database_path, then get_db_path()
    """

    def __init__(
        self,
        database_path: Optional[str] = None,
        config_path: Optional[Path] = None,
    ):
        """Initialize settings.

        Args:
            database_path: Path to the garden database file. If None,
                resolved from env vars, TOML, then get_db_path().
            config_path: Optional explicit path to config.toml
        """
        self._config: dict[str, Any] = {}
        self._explicit_database_path = database_path

        config_path = get_config_path(config_path)

        if config_path.exists():
            try:
                self._config = load_toml_config(config_path)
            except ValueError as e:
                # Warn and continue with defaults
                import warnings
                warnings.warn(f"Failed to load config from {config_path}: {e}")

        self._apply_config()

    def _apply_config(self):
        """Apply TOML configuration and env var overrides (env var > TOML > default)."""
        storage_config = self._config.get("storage", {})
        paths_config = self._config.get("paths", {})
        logging_config = self._config.get("logging", {})
        catalog_config = self._config.get("catalog", {})

        context = resolve_context()

        # Paths
        if "SEEDBED_DATA_DIR" in os.environ:
            self.data_dir = Path(os.environ["SEEDBED_DATA_DIR"])
        elif paths_config.get("data_dir"):
            self.data_dir = Path(paths_config["data_dir"])
        else:
            self.data_dir = context.data_dir

        if "SEEDBED_CONFIG_DIR" in os.environ:
            self.config_dir = Path(os.environ["SEEDBED_CONFIG_DIR"])
        elif paths_config.get("config_dir"):
            self.config_dir = Path(paths_config["config_dir"])
        else:
            self.config_dir = context.config_dir

        # Database
        if self._explicit_database_path:
            self.database_path = str(self._explicit_database_path)
        elif "SEEDBED_DB" in os.environ:
            self.database_path = os.environ["SEEDBED_DB"]
        elif storage_config.get("database_path"):
            self.database_path = str(storage_config["database_path"])
        elif paths_config.get("data_dir"):
            self.database_path = str(self.data_dir / "garden.db")
        else:
            self.database_path = str(get_db_path())

        # Logging
        self.log_level = os.environ.get(
            "SEEDBED_LOG_LEVEL",
            logging_config.get("level", "info"),
        )
        log_file = os.environ.get("SEEDBED_LOG_FILE", logging_config.get("file"))
        self.log_file = Path(log_file) if log_file else None

        # Static catalog
        catalog_path = os.environ.get("SEEDBED_CATALOG", catalog_config.get("path"))
        self.catalog_path = Path(catalog_path) if catalog_path else None
