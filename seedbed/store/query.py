"""Query builders and utilities.

QUERY BUILDER SCOPE:
Abstract query patterns that are repeated more than twice.
Don't build a full ORM - just helpers for common patterns.
"""

from typing import Any


def build_where_clause(conditions: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build dynamic WHERE clause from condition dictionary.

    Args:
        conditions: Column names to values. None values are skipped.

    Returns:
        Tuple of (where_clause, params) where:
        - where_clause: SQL WHERE clause (without "WHERE" keyword)
        - params: List of parameter values for placeholders

    Examples:
        >>> build_where_clause({"plant_id": "p1", "type": "stage"})
        ('plant_id = ? AND type = ?', ['p1', 'stage'])

        >>> build_where_clause({"plant_id": None})
        ('1=1', [])
    """
    where_parts = []
    params = []

    for key, value in conditions.items():
        if value is None:
            continue
        where_parts.append(f"{key} = ?")
        params.append(value)

    where_clause = " AND ".join(where_parts) if where_parts else "1=1"
    return where_clause, params


def build_insert(
    table: str,
    row: dict[str, Any],
    computed: dict[str, str] | None = None,
) -> tuple[str, list[Any]]:
    """Build an INSERT statement for every key of a row dictionary.

    Args:
        table: Table name
        row: Column names to values (None is written as NULL)
        computed: Column names to SQL expressions evaluated by the
                  statement itself (no placeholder)

    Returns:
        Tuple of (sql, params)

    Examples:
        >>> build_insert("kv_store", {"key": "k", "value": "v"})
        ('INSERT INTO kv_store (key, value) VALUES (?, ?)', ['k', 'v'])

        >>> build_insert("areas", {"id": "a1"}, {"seq": "(SELECT 1)"})
        ('INSERT INTO areas (id, seq) VALUES (?, (SELECT 1))', ['a1'])
    """
    computed = computed or {}
    columns = list(row) + list(computed)
    values = ["?" for _ in row] + list(computed.values())
    sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(values)})"
    return sql, list(row.values())
