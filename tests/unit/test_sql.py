from __future__ import annotations

from types import MappingProxyType

import pytest

from sqlite3po.exceptions import SchemaError
from sqlite3po.orm import sql

ATTRIBUTES = {"text": "varchar(255)", "score": "integer"}


def test_create_table_declares_only_the_id_column():
    expected = "CREATE TABLE IF NOT EXISTS dummy (id INTEGER PRIMARY KEY)"
    assert sql.create_table_sql("dummy") == expected


def test_add_columns_follow_declaration_order():
    assert sql.add_columns_sql("dummy", ATTRIBUTES) == [
        "ALTER TABLE dummy ADD COLUMN text varchar(255)",
        "ALTER TABLE dummy ADD COLUMN score integer",
    ]


def test_insert_binds_every_attribute_but_id():
    assert (
        sql.insert_sql("dummy", ATTRIBUTES)
        == "INSERT INTO dummy (text, score) VALUES ($text, $score)"
    )


def test_update_sets_every_attribute_by_id():
    assert (
        sql.update_sql("dummy", ATTRIBUTES)
        == "UPDATE dummy SET text = $text, score = $score WHERE id = $id"
    )


def test_delete_and_select_by_id():
    assert sql.delete_sql("dummy") == "DELETE FROM dummy WHERE id = $id"
    assert sql.select_by_id_sql("dummy") == "SELECT * FROM dummy WHERE id = $id"
    assert sql.truncate_sql("dummy") == "DELETE FROM dummy"


def test_empty_attribute_map_still_yields_valid_dml():
    assert sql.insert_sql("marker", {}) == "INSERT INTO marker DEFAULT VALUES"
    assert sql.update_sql("marker", {}) == "UPDATE marker SET id = $id WHERE id = $id"
    assert sql.add_columns_sql("marker", {}) == []


def test_bind_var_name_prefixes_dollar():
    assert sql.bind_var_name("text") == "$text"


def test_validate_attributes_returns_read_only_copy():
    source = dict(ATTRIBUTES)
    validated = sql.validate_attributes(source)
    source["late"] = "text"

    assert isinstance(validated, MappingProxyType)
    assert list(validated) == ["text", "score"]
    with pytest.raises(TypeError):
        validated["other"] = "text"  # type: ignore[index]


@pytest.mark.parametrize("reserved", ["id", "Id", "ID"])
def test_validate_attributes_rejects_id(reserved):
    with pytest.raises(SchemaError):
        sql.validate_attributes({reserved: "integer"})
