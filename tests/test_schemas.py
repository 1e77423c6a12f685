"""Tests for seedbed.schemas module.

Coverage:
- get_sql_schema(name) - Return the bundled garden.sql
- SCHEMA_VERSION matches the version the script records
"""

import sqlite3

import pytest

from seedbed.schemas import SCHEMA_VERSION, get_sql_schema


class TestGetSqlSchema:
    """Tests for get_sql_schema function."""

    def test_get_garden_schema(self):
        """get_sql_schema('garden') returns the garden SQL schema."""
        schema = get_sql_schema('garden')

        assert isinstance(schema, str)
        assert 'CREATE TABLE IF NOT EXISTS areas' in schema
        assert 'CREATE TABLE IF NOT EXISTS plants' in schema
        assert 'CREATE TABLE IF NOT EXISTS journal_entries' in schema
        assert 'CREATE TABLE IF NOT EXISTS custom_catalog_entries' in schema
        assert 'CREATE TABLE IF NOT EXISTS kv_store' in schema
        assert 'ON DELETE CASCADE' in schema

    def test_default_name(self):
        assert get_sql_schema() == get_sql_schema('garden')

    def test_invalid_name_raises_value_error(self):
        with pytest.raises(ValueError, match="Invalid schema"):
            get_sql_schema('soil')

    def test_version_matches_script(self):
        """The version the script inserts is SCHEMA_VERSION."""
        conn = sqlite3.connect(':memory:')
        try:
            conn.executescript(get_sql_schema('garden'))
            row = conn.execute(
                "SELECT value FROM _schema_metadata WHERE key = 'version'"
            ).fetchone()
        finally:
            conn.close()

        assert row[0] == SCHEMA_VERSION

    def test_script_is_idempotent(self):
        conn = sqlite3.connect(':memory:')
        try:
            conn.executescript(get_sql_schema('garden'))
            conn.executescript(get_sql_schema('garden'))
            count = conn.execute("SELECT COUNT(*) FROM _schema_metadata").fetchone()[0]
        finally:
            conn.close()

        assert count == 1
