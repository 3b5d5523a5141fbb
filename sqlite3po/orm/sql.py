"""
SQL text generation for bound tables.

Pure functions of (table name, attribute map). Tables are created with only the
integer primary key; every declared attribute is then added with its own
``ALTER TABLE ... ADD COLUMN`` so that binding an extended attribute map against
an existing table adds the new columns and leaves existing rows in place.

Column types are passed through verbatim. Bind variables are named after their
column with a ``$`` prefix.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping

from sqlite3po.exceptions import SchemaError

ID_COLUMN = "id"


def validate_attributes(attributes: Mapping[str, str]) -> Mapping[str, str]:
    """
    Check an attribute map and return a read-only copy of it.

    Raises
    ------
    SchemaError
        If any attribute is named ``id`` (in any letter case; SQLite column names
        are case-insensitive).
    """
    for name in attributes:
        if name.lower() == ID_COLUMN:
            raise SchemaError(f"Class must not contain an attribute named '{name}'")
    return MappingProxyType(dict(attributes))


def bind_var_name(column: str) -> str:
    return f"${column}"


def create_table_sql(table: str) -> str:
    return f"CREATE TABLE IF NOT EXISTS {table} ({ID_COLUMN} INTEGER PRIMARY KEY)"


def add_column_sql(table: str, column: str, column_type: str) -> str:
    return f"ALTER TABLE {table} ADD COLUMN {column} {column_type}"


def add_columns_sql(table: str, attributes: Mapping[str, str]) -> List[str]:
    """One ``ADD COLUMN`` statement per attribute, in declaration order."""
    return [add_column_sql(table, name, column_type) for name, column_type in attributes.items()]


def insert_sql(table: str, attributes: Mapping[str, str]) -> str:
    columns = list(attributes)
    if not columns:
        return f"INSERT INTO {table} DEFAULT VALUES"
    bind_vars = [bind_var_name(column) for column in columns]
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(bind_vars)})"


def update_sql(table: str, attributes: Mapping[str, str]) -> str:
    # With no attributes there is nothing to set; assigning id to itself keeps the
    # statement valid and the row untouched.
    columns = list(attributes) or [ID_COLUMN]
    assignments = [f"{column} = {bind_var_name(column)}" for column in columns]
    return (
        f"UPDATE {table} SET {', '.join(assignments)} "
        f"WHERE {ID_COLUMN} = {bind_var_name(ID_COLUMN)}"
    )


def delete_sql(table: str) -> str:
    return f"DELETE FROM {table} WHERE {ID_COLUMN} = {bind_var_name(ID_COLUMN)}"


def select_by_id_sql(table: str) -> str:
    return f"SELECT * FROM {table} WHERE {ID_COLUMN} = {bind_var_name(ID_COLUMN)}"


def truncate_sql(table: str) -> str:
    return f"DELETE FROM {table}"


def count_sql(table: str) -> str:
    return f"SELECT COUNT(*) AS row_count FROM {table}"


def select_all_sql(table: str) -> str:
    return f"SELECT * FROM {table} ORDER BY {ID_COLUMN}"


__all__ = [
    "ID_COLUMN",
    "validate_attributes",
    "bind_var_name",
    "create_table_sql",
    "add_column_sql",
    "add_columns_sql",
    "insert_sql",
    "update_sql",
    "delete_sql",
    "select_by_id_sql",
    "truncate_sql",
    "count_sql",
    "select_all_sql",
]
