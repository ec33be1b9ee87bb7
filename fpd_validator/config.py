"""Validator configuration via environment variables.

Uses pydantic-settings so every field can be overridden with an
env var prefixed ``FPD_`` (e.g. ``FPD_SKIP_VALIDATIONS``,
``FPD_LOG_LEVEL``).  The bundled ORTB2 schema table is used unless
``FPD_SCHEMA_PATH`` points at a replacement.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_MAX_DEPTH = 64
DEFAULT_OPTOUT_KEY = "_pubcid_optout"


class ValidatorSettings(BaseSettings):
    """Runtime settings for the FPD validator."""

    model_config = {"env_prefix": "FPD_", "env_file": ".env", "extra": "ignore"}

    # -- validation ---------------------------------------------------------
    skip_validations: bool = Field(
        default=False,
        description="Pass data through without filtering",
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=256,
        description="Nested containers deeper than this are dropped",
    )
    schema_path: Optional[str] = Field(
        default=None,
        description="JSON schema table; bundled ORTB2 map when unset",
    )

    # -- opt-out ------------------------------------------------------------
    optout_key: str = Field(
        default=DEFAULT_OPTOUT_KEY,
        description="Cookie / local storage key signalling opt-out",
    )

    # -- logging ------------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level")
    diagnostics_log_level: Optional[str] = Field(
        default=None,
        description="Level for per-field diagnostics; falls back to log_level",
    )
    log_format: str = Field(
        default="console",
        description="Log output format: 'console' or 'json'",
    )
