"""Tests for fpd_validator.config -- env-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fpd_validator.config import DEFAULT_MAX_DEPTH, DEFAULT_OPTOUT_KEY, ValidatorSettings


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for var in ("FPD_SKIP_VALIDATIONS", "FPD_MAX_DEPTH", "FPD_SCHEMA_PATH", "FPD_LOG_FORMAT"):
        monkeypatch.delenv(var, raising=False)


def test_defaults() -> None:
    settings = ValidatorSettings()
    assert settings.skip_validations is False
    assert settings.max_depth == DEFAULT_MAX_DEPTH
    assert settings.schema_path is None
    assert settings.optout_key == DEFAULT_OPTOUT_KEY
    assert settings.log_format == "console"
    assert settings.diagnostics_log_level is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FPD_SKIP_VALIDATIONS", "1")
    monkeypatch.setenv("FPD_MAX_DEPTH", "8")
    monkeypatch.setenv("FPD_LOG_FORMAT", "json")
    settings = ValidatorSettings()
    assert settings.skip_validations is True
    assert settings.max_depth == 8
    assert settings.log_format == "json"


def test_dotenv_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("FPD_SCHEMA_PATH=/etc/fpd/schema.json\n", encoding="utf-8")
    assert ValidatorSettings().schema_path == "/etc/fpd/schema.json"


def test_max_depth_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ValidatorSettings(max_depth=0)


def test_max_depth_is_bounded() -> None:
    with pytest.raises(ValidationError):
        ValidatorSettings(max_depth=10_000)
