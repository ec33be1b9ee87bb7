"""Pydantic v2 models for schema descriptors and the engine's inputs.

Field descriptors accept both the camelCase keys used by hand-authored
ORTB2 schema tables (``isArray``, ``childType``, ``redactOnOptOut``) and
their snake_case attribute names.  The legacy spellings ``childisArray``
and ``optoutApplies`` are accepted as well so older tables load as-is.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field

# Shape kinds understood by the type check.  Anything else fails closed.
TYPE_STRING = "string"
TYPE_NUMBER = "number"
TYPE_OBJECT = "object"

SUPPORTED_TYPES = frozenset({TYPE_STRING, TYPE_NUMBER, TYPE_OBJECT})


# ---------------------------------------------------------------------------
# Schema descriptors
# ---------------------------------------------------------------------------

class FieldDescriptor(BaseModel):
    """Expected shape and constraints of a single field."""

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    type: Optional[str] = Field(
        default=None,
        description="Base shape: 'string', 'number' or 'object'",
    )
    is_array: bool = Field(
        default=False,
        validation_alias=AliasChoices("isArray", "is_array"),
        serialization_alias="isArray",
        description="Field value is itself an array of ``type``",
    )
    child_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("childType", "child_type"),
        serialization_alias="childType",
        description="Shape of each array element",
    )
    child_is_array: bool = Field(
        default=False,
        validation_alias=AliasChoices("childIsArray", "childisArray", "child_is_array"),
        serialization_alias="childIsArray",
    )
    children: Optional[Dict[str, FieldDescriptor]] = Field(
        default=None,
        description="Nested schema for the field's object value (or elements)",
    )
    required: List[str] = Field(
        default_factory=list,
        description="Names that must be present and non-empty in the value",
    )
    invalid: bool = Field(
        default=False,
        description="Field is always dropped",
    )
    redact_on_opt_out: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "redactOnOptOut", "optoutApplies", "redact_on_opt_out"
        ),
        serialization_alias="redactOnOptOut",
        description="Field is dropped while the redaction flag is active",
    )

    @property
    def has_children(self) -> bool:
        return self.children is not None


FieldDescriptor.model_rebuild()


# ---------------------------------------------------------------------------
# Engine inputs
# ---------------------------------------------------------------------------

class ValidationConfig(BaseModel):
    """Per-call configuration record for :func:`fpd_validator.engine.run`."""

    model_config = {"extra": "allow", "populate_by_name": True}

    skip_validations: bool = Field(
        default=False,
        validation_alias=AliasChoices("skipValidations", "skip_validations"),
        description="Return the data untouched without traversal",
    )


class FpdData(BaseModel):
    """Top-level data record: one global tree plus one tree per bidder.

    Only the envelope is validated here; the trees themselves stay
    untyped and are handed to the filters unchanged.
    """

    model_config = {"extra": "allow", "populate_by_name": True}

    global_: Optional[Dict[str, Any]] = Field(default=None, alias="global")
    bidder: Dict[str, Optional[Dict[str, Any]]] = Field(...)
