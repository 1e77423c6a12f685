"""Schema access utilities for Seedbed.

This module provides runtime access to the bundled SQL schema.

Lookup order:
- importlib.resources first (installed package)
- file reading next to this module (development checkout)
- FileNotFoundError if neither location has the schema

USAGE:
    >>> from seedbed.schemas import get_sql_schema
    >>> garden_sql = get_sql_schema('garden')
"""

from __future__ import annotations

from importlib.resources import files as resource_files
from pathlib import Path

VALID_SCHEMAS = {"garden"}

# Bumped whenever garden.sql changes shape
SCHEMA_VERSION = "20261016"


def get_sql_schema(name: str = "garden") -> str:
    """Get SQL schema content.

    Args:
        name: Schema name ('garden')

    Returns:
        SQL schema content as string

    Raises:
        ValueError: If name is not a known schema
        FileNotFoundError: If schema file not found in bundled or file locations
    """
    if name not in VALID_SCHEMAS:
        raise ValueError(
            f"Invalid schema: {name!r}. Must be one of: {sorted(VALID_SCHEMAS)}"
        )

    try:
        schema_file = resource_files("seedbed") / "schemas" / "sql" / f"{name}.sql"
        if schema_file.is_file():
            return schema_file.read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError):
        # Fall through to file reading
        pass

    file_path = Path(__file__).parent / "schemas" / "sql" / f"{name}.sql"
    if file_path.exists():
        return file_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"SQL schema file not found for {name!r}. Searched: {file_path}"
    )
