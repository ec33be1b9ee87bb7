"""Tests for fpd_validator.schema_table -- structured path lookup and loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fpd_validator.errors import SchemaError
from fpd_validator.schema_table import SchemaTable, load_default_table


class TestLookup:
    def test_top_level(self, ortb2_table: SchemaTable) -> None:
        assert ortb2_table.lookup(("imp",)).invalid is True

    def test_descends_through_children(self, ortb2_table: SchemaTable) -> None:
        segment = ortb2_table.lookup(("user", "data", "segment"))
        assert segment is not None
        assert segment.required == ["id"]
        assert ortb2_table.lookup(("user", "data")).required == ["name", "segment"]

    def test_redaction_flags(self, ortb2_table: SchemaTable) -> None:
        assert ortb2_table.lookup(("user", "yob")).redact_on_opt_out is True
        assert ortb2_table.lookup(("user", "keywords")).redact_on_opt_out is False

    @pytest.mark.parametrize(
        "path",
        [(), ("nope",), ("user", "nope"), ("site", "name", "x"), ("user", "ext", "x")],
    )
    def test_missing_paths(self, ortb2_table: SchemaTable, path) -> None:
        assert ortb2_table.lookup(path) is None

    def test_container_protocol(self, ortb2_table: SchemaTable) -> None:
        assert "user" in ortb2_table
        assert "children" not in ortb2_table
        assert set(ortb2_table) >= {"site", "app", "device", "user"}
        assert len(ortb2_table) == len(list(ortb2_table))


class TestLoading:
    def test_from_dict_rejects_bad_descriptor(self) -> None:
        with pytest.raises(SchemaError):
            SchemaTable.from_dict({"a": 5})

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"age": {"type": "number"}}), encoding="utf-8")
        table = SchemaTable.from_file(path)
        assert table.lookup(("age",)).type == "number"

    def test_from_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaError, match="Could not read"):
            SchemaTable.from_file(tmp_path / "missing.json")

    def test_from_file_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(SchemaError, match="must be a JSON object"):
            SchemaTable.from_file(path)

    def test_default_table_is_cached(self) -> None:
        assert load_default_table() is load_default_table()
