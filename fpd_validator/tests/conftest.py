"""Shared pytest fixtures for FPD validator tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Generator

import pytest

from fpd_validator.diagnostics import DiagnosticCollector
from fpd_validator.engine import FilterContext
from fpd_validator.schema_table import SchemaTable

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_table_cache() -> Generator[None, None, None]:
    """Clear the bundled schema table cache between tests."""
    from fpd_validator import schema_table

    schema_table._table_cache = None
    yield
    schema_table._table_cache = None


@pytest.fixture()
def sample_data() -> Dict[str, Any]:
    """Load the canonical sample FPD record as a plain dict."""
    path = _FIXTURES_DIR / "fpd_sample.json"
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture()
def ortb2_table() -> SchemaTable:
    """The bundled ORTB2 schema table."""
    return SchemaTable.from_file(_FIXTURES_DIR / "ortb2_map.json")


@pytest.fixture()
def collector() -> DiagnosticCollector:
    return DiagnosticCollector()


@pytest.fixture()
def make_ctx(collector: DiagnosticCollector):
    """Build a ``FilterContext`` over a raw schema dict, collecting diagnostics."""

    def _make(raw_schema: Dict[str, Any], redact: bool = False, max_depth: int = 64) -> FilterContext:
        return FilterContext(
            schema=SchemaTable.from_dict(raw_schema),
            redact=redact,
            emit=collector,
            max_depth=max_depth,
        )

    return _make
