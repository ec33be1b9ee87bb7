"""Read-only schema table keyed by structured field paths.

A path is a sequence of keys, e.g. ``("user", "data", "segment")``.  The
first key selects a top-level descriptor; every following key descends
through the parent's ``children``.  Any missing segment resolves to
``None``, which the filters treat as "pass the field through unchecked".

The bundled ORTB2 map lives in ``fixtures/ortb2_map.json`` and is parsed
once per process.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from fpd_validator.errors import SchemaError
from fpd_validator.schemas import FieldDescriptor

_FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"
_DEFAULT_TABLE_FILE = "ortb2_map.json"

_descriptor_map = TypeAdapter(Dict[str, FieldDescriptor])


class SchemaTable:
    """Immutable mapping from structured paths to field descriptors."""

    def __init__(self, fields: Mapping[str, FieldDescriptor]) -> None:
        self._fields: Dict[str, FieldDescriptor] = dict(fields)

    # -- construction -------------------------------------------------------

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SchemaTable":
        """Validate a plain ``{field: descriptor}`` mapping."""
        try:
            fields = _descriptor_map.validate_python(raw)
        except ValidationError as exc:
            raise SchemaError(f"Invalid schema table: {exc}") from exc
        return cls(fields)

    @classmethod
    def from_file(cls, path: str | Path) -> "SchemaTable":
        """Load a schema table from a JSON file."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise SchemaError(f"Could not read schema table {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise SchemaError(f"Schema table {path} must be a JSON object")
        return cls.from_dict(raw)

    # -- lookup -------------------------------------------------------------

    def lookup(self, path: Sequence[str]) -> Optional[FieldDescriptor]:
        """Return the descriptor at *path*, or ``None`` if there is none."""
        if not path:
            return None
        descriptor = self._fields.get(path[0])
        for key in path[1:]:
            if descriptor is None or descriptor.children is None:
                return None
            descriptor = descriptor.children.get(key)
        return descriptor

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)


# ---------------------------------------------------------------------------
# Bundled table
# ---------------------------------------------------------------------------

_table_cache: Optional[SchemaTable] = None


def load_default_table() -> SchemaTable:
    """Return the bundled ORTB2 schema table (parsed once, then cached)."""
    global _table_cache
    if _table_cache is None:
        _table_cache = SchemaTable.from_file(_FIXTURES_DIR / _DEFAULT_TABLE_FILE)
    return _table_cache
