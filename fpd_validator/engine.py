"""Schema-driven validation and filtering of ORTB2 first-party data.

Two mutually recursive filters walk an untyped data tree against a
:class:`~fpd_validator.schema_table.SchemaTable`:

* :func:`filter_object` keeps the keys of a mapping that are not marked
  invalid, pass the type check, are not redacted, and are non-empty after
  recursion.  Keys without a descriptor pass through untouched.
* :func:`filter_array` runs a three-stage pipeline (type, required,
  shape) over the elements of a list, recursing into object elements
  when the schema declares children.

Nothing in the traversal raises.  Every rejected field or element
produces one diagnostic line on the context's sink, and the input tree
is never mutated: the result is always a newly built tree.

All per-run state (redaction flag, sink, depth limit) travels in a
:class:`FilterContext`, so concurrent :func:`run` calls never share
mutable state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import structlog
from pydantic import ValidationError

from fpd_validator.config import DEFAULT_MAX_DEPTH
from fpd_validator.diagnostics import DiagnosticCollector, DiagnosticSink, log_sink
from fpd_validator.errors import InvalidInputError
from fpd_validator.registry import FpdSubmodule, submodule
from fpd_validator.schema_table import SchemaTable, load_default_table
from fpd_validator.schemas import (
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
    FieldDescriptor,
    FpdData,
    ValidationConfig,
)

logger = structlog.get_logger(__name__)

RedactionSource = Union[bool, Any, Callable[[], Any]]
FieldPath = Tuple[str, ...]


@dataclass(frozen=True)
class FilterContext:
    """Everything a single validation run needs, threaded through recursion."""

    schema: SchemaTable
    redact: bool = False
    emit: DiagnosticSink = log_sink
    max_depth: int = DEFAULT_MAX_DEPTH


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_structured(value: Any) -> bool:
    return isinstance(value, (dict, list))


def is_empty_data(value: Any) -> bool:
    """Return ``True`` if *value* counts as absent.

    Empty dicts and lists are empty.  A scalar is empty when it is not a
    number and is falsy, so ``""``, ``None`` and ``False`` are empty but
    numeric zero is not.
    """
    if _is_structured(value):
        return len(value) == 0
    return not _is_number(value) and not value


def type_check(value: Any, type_name: Optional[str], is_array: bool = False) -> bool:
    """Return ``True`` if *value* has the declared shape.

    ``object`` matches dicts and lists, but only when list-ness equals
    *is_array*.  Unknown type names never match.
    """
    if type_name == TYPE_STRING:
        return isinstance(value, str)
    if type_name == TYPE_NUMBER:
        return _is_number(value) and math.isfinite(value)
    if type_name == TYPE_OBJECT:
        return _is_structured(value) and isinstance(value, list) == bool(is_array)
    return False


def required_field_check(
    obj: Any,
    required: Sequence[str],
    label: str,
    index: Optional[int],
    emit: DiagnosticSink,
) -> bool:
    """Check every name in *required* is present and non-empty in *obj*.

    All names are checked; one diagnostic is emitted per failing name.
    *index* is the element's position for array elements, ``None`` for a
    plain object field.
    """
    where = f"{label} property" if index is None else f"{label}[] value at index {index}"
    ok = True
    for name in required:
        value = obj.get(name) if isinstance(obj, dict) else None
        if value is None or is_empty_data(value):
            ok = False
            emit(f"Filtered {where} in ortb2 data: missing required property {name}")
    return ok


def _too_deep(ctx: FilterContext, depth: int) -> bool:
    return depth > ctx.max_depth


_TOO_DEEP = object()


def _copy_tree(value: Any, ctx: FilterContext, depth: int) -> Any:
    """Copy an unvalidated subtree whose outermost container sits at *depth*.

    Returns ``_TOO_DEEP`` instead when any container inside it is nested
    beyond ``ctx.max_depth``; the caller drops the whole subtree.
    """
    if isinstance(value, dict):
        if _too_deep(ctx, depth):
            return _TOO_DEEP
        copied: Dict[Any, Any] = {}
        for key, item in value.items():
            item = _copy_tree(item, ctx, depth + 1)
            if item is _TOO_DEEP:
                return _TOO_DEEP
            copied[key] = item
        return copied
    if isinstance(value, list):
        if _too_deep(ctx, depth):
            return _TOO_DEEP
        items: List[Any] = []
        for item in value:
            item = _copy_tree(item, ctx, depth + 1)
            if item is _TOO_DEEP:
                return _TOO_DEEP
            items.append(item)
        return items
    return value


# ---------------------------------------------------------------------------
# Array filter
# ---------------------------------------------------------------------------

def filter_array(
    arr: List[Any],
    element_type: Optional[str],
    element_is_array: bool,
    ctx: FilterContext,
    path: FieldPath,
    label: str,
    depth: int = 1,
) -> List[Any]:
    """Return the elements of *arr* that conform to the element shape.

    *path* addresses the array field's own descriptor; its ``required``
    list applies to each element and its ``children`` describe object
    elements.  Diagnostics carry each element's index in *arr*.
    """
    descriptor = ctx.schema.lookup(path)
    required = descriptor.required if descriptor is not None else []

    # 1. Type stage
    typed: List[Tuple[int, Any]] = []
    for i, element in enumerate(arr):
        if (
            type_check(element, element_type, element_is_array)
            and isinstance(element, list) == bool(element_is_array)
        ):
            typed.append((i, element))
        else:
            ctx.emit(
                f"Filtered {label}[] value at index {i} in ortb2 data: "
                f"expected type {element_type}"
            )

    # 2. Required stage
    if required:
        typed = [
            (i, element)
            for i, element in typed
            if required_field_check(element, required, label, i, ctx.emit)
        ]

    # 3. Shape stage
    result: List[Any] = []
    for i, element in typed:
        kept = False
        if element_type == TYPE_STRING:
            result.append(element)
            kept = True
        elif element_type == TYPE_OBJECT:
            if descriptor is not None and descriptor.has_children and isinstance(element, dict):
                if _too_deep(ctx, depth + 1):
                    ctx.emit(
                        f"Filtered {label}[] value at index {i} in ortb2 data: "
                        "maximum depth exceeded"
                    )
                    continue
                validated = filter_object(element, ctx, path, label + ".", depth + 1)
                if validated and required_field_check(
                    validated, required, label, i, ctx.emit
                ):
                    result.append(validated)
                    kept = True
            else:
                copied = _copy_tree(element, ctx, depth + 1)
                if copied is _TOO_DEEP:
                    ctx.emit(
                        f"Filtered {label}[] value at index {i} in ortb2 data: "
                        "maximum depth exceeded"
                    )
                    continue
                result.append(copied)
                kept = True

        if not kept:
            ctx.emit(
                f"Filtered {label}[] value at index {i} in ortb2 data: "
                f"expected type {element_type}"
            )

    return result


# ---------------------------------------------------------------------------
# Object filter
# ---------------------------------------------------------------------------

def _expected_type(descriptor: FieldDescriptor) -> str:
    return "array" if descriptor.is_array else str(descriptor.type)


def filter_object(
    obj: Optional[Mapping[str, Any]],
    ctx: FilterContext,
    path: FieldPath = (),
    label: str = "",
    depth: int = 1,
) -> Dict[str, Any]:
    """Return a new mapping holding the conforming subset of *obj*.

    *path* is the structured schema path of *obj* itself (``()`` for the
    root); each key is looked up at ``path + (key,)``.
    """
    if obj is None:
        return {}

    # 1. Invalid properties
    keys: List[str] = []
    for key in obj:
        descriptor = ctx.schema.lookup(path + (key,))
        if descriptor is not None and descriptor.invalid:
            ctx.emit(f"Filtered {label}{key} property in ortb2 data: invalid property")
            continue
        keys.append(key)

    # 2. Type check
    typed: List[Tuple[str, Optional[FieldDescriptor]]] = []
    for key in keys:
        descriptor = ctx.schema.lookup(path + (key,))
        if descriptor is None or type_check(obj[key], descriptor.type, descriptor.is_array):
            typed.append((key, descriptor))
            continue
        ctx.emit(
            f"Filtered {label}{key} property in ortb2 data: "
            f"expected type {_expected_type(descriptor)}"
        )

    # 3. Redaction, recursion and emptiness
    result: Dict[str, Any] = {}
    for key, descriptor in typed:
        value = obj[key]
        if descriptor is None:
            copied = _copy_tree(value, ctx, depth + 1)
            if copied is _TOO_DEEP:
                ctx.emit(f"Filtered {label}{key} property in ortb2 data: maximum depth exceeded")
                continue
            result[key] = copied
            continue

        if descriptor.redact_on_opt_out and ctx.redact:
            ctx.emit(f"Filtered {label}{key} data: pubcid optout found")
            continue

        child_path = path + (key,)
        recurses = descriptor.type == TYPE_OBJECT and not descriptor.is_array
        recurses_array = descriptor.is_array and descriptor.child_type is not None
        if (recurses or recurses_array) and _too_deep(ctx, depth + 1):
            ctx.emit(f"Filtered {label}{key} property in ortb2 data: maximum depth exceeded")
            continue

        if recurses:
            modified = filter_object(value, ctx, child_path, f"{label}{key}.", depth + 1)
        elif recurses_array:
            modified = filter_array(
                value,
                descriptor.child_type,
                descriptor.child_is_array,
                ctx,
                child_path,
                label + key,
                depth + 1,
            )
        else:
            modified = _copy_tree(value, ctx, depth + 1)
            if modified is _TOO_DEEP:
                ctx.emit(f"Filtered {label}{key} property in ortb2 data: maximum depth exceeded")
                continue

        # An object missing a required property is dropped as a whole.
        if (
            recurses
            and descriptor.required
            and modified
            and not required_field_check(
                modified, descriptor.required, label + key, None, ctx.emit
            )
        ):
            continue

        if is_empty_data(modified):
            ctx.emit(f"Filtered {label}{key} property in ortb2 data: empty data found")
            continue
        result[key] = modified

    return result


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _resolve_redaction(source: RedactionSource) -> bool:
    if callable(source):
        source = source()
    return bool(source)


def _skip_validations(config: Any) -> bool:
    if config is None:
        return False
    if isinstance(config, ValidationConfig):
        return config.skip_validations
    if isinstance(config, Mapping):
        try:
            return ValidationConfig.model_validate(config).skip_validations
        except ValidationError as exc:
            raise InvalidInputError(f"Malformed validation config: {exc}") from exc
    return bool(getattr(config, "skip_validations", False))


def _parse_envelope(data: Any) -> FpdData:
    if not isinstance(data, Mapping):
        raise InvalidInputError(
            f"FPD data must be a mapping, got {type(data).__name__}"
        )
    try:
        return FpdData.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(f"Malformed FPD data record: {exc}") from exc


def run(
    config: Any,
    data: Any,
    redaction_source: RedactionSource = False,
    *,
    schema: Optional[SchemaTable] = None,
    sink: Optional[DiagnosticSink] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """Validate the global tree and every bidder tree in *data*.

    *redaction_source* is a flag or a zero-argument callable; it is
    evaluated exactly once per call.  When ``config.skip_validations`` is
    set, *data* is returned as-is without traversal.

    Raises:
        InvalidInputError: *data* is not a ``{"global", "bidder"}`` record,
            or *config* carries an uninterpretable ``skipValidations``.
    """
    redact = _resolve_redaction(redaction_source)

    if _skip_validations(config):
        logger.info("fpd_validation_skipped")
        return data

    envelope = _parse_envelope(data)
    collector = DiagnosticCollector(forward=sink if sink is not None else log_sink)
    ctx = FilterContext(
        schema=schema if schema is not None else load_default_table(),
        redact=redact,
        emit=collector,
        max_depth=max_depth,
    )

    result = {
        "global": filter_object(envelope.global_, ctx),
        "bidder": {
            name: filter_object(tree, ctx) for name, tree in envelope.bidder.items()
        },
    }

    logger.info(
        "fpd_validation_complete",
        bidders=len(envelope.bidder),
        redacted=redact,
        diagnostics=len(collector),
    )
    return result


def process_fpd(
    config: Any,
    data: Any,
    redaction_source: RedactionSource = False,
) -> Any:
    """Submodule hook: validate *data* with the bundled schema table."""
    return run(config, data, redaction_source)


validation_submodule = FpdSubmodule(name="validation", queue=1, process_fpd=process_fpd)

submodule("firstPartyData", validation_submodule)
