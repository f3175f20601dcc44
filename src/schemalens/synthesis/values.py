"""Example value synthesis from schemas.

Produces one representative JSON-compatible value per schema, used as the
prefilled body of a try-it request. Explicit literals win over anything
inferred: ``const``/``example``/``examples``, then ``default``, then the
first ``enum`` entry, then composition, and only then type-driven
synthesis.

Recursion carries a numeric depth. Past the configured ceiling the result
is ``None``, which keeps self-referencing schemas finite.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from schemalens.config import EngineSettings, get_settings
from schemalens.resolution.keywords import (
    composition_branches,
    effective_kind,
    explicit_example,
    has_value,
    string_list,
)
from schemalens.resolution.models import UnresolvedRef
from schemalens.resolution.pointer import resolve_pointer

logger = logging.getLogger(__name__)

NIL_UUID = "00000000-0000-0000-0000-000000000000"


def synthesize(
    node: Mapping[str, Any] | None,
    dictionary: Mapping[str, Any] | None = None,
    depth: int = 0,
    *,
    settings: EngineSettings | None = None,
) -> Any:
    """Generate a representative value for a schema node.

    Args:
        node: Raw schema node or reference.
        dictionary: The full document pointers are relative to.
        depth: Current nesting depth.
        settings: Engine settings (depth ceiling, placeholder literals).

    Returns:
        A JSON-compatible value, or ``None`` for unknown kinds, dangling
        pointers and anything past the depth ceiling.
    """
    settings = settings or get_settings()
    dictionary = dictionary if dictionary is not None else {}

    if depth > settings.synthesis_max_depth:
        logger.debug("Synthesis depth ceiling %d reached", settings.synthesis_max_depth)
        return None
    if not isinstance(node, Mapping):
        return None

    schema = resolve_pointer(node, dictionary, settings)
    if isinstance(schema, UnresolvedRef) or not isinstance(schema, Mapping):
        return None

    literal = explicit_example(schema)
    if has_value(literal):
        return copy.deepcopy(literal)
    if schema.get("default") is not None:
        return copy.deepcopy(schema["default"])
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return copy.deepcopy(enum[0])

    all_of = composition_branches(schema, "allOf")
    if all_of:
        return _merge_all_of(all_of, dictionary, depth, settings)
    for keyword in ("oneOf", "anyOf"):
        branches = composition_branches(schema, keyword)
        if branches:
            return synthesize(branches[0], dictionary, depth + 1, settings=settings)

    kind = effective_kind(schema)
    if kind == "object":
        return _synthesize_object(schema, dictionary, depth, settings)
    if kind == "array":
        return _synthesize_array(schema, dictionary, depth, settings)
    if kind == "string":
        return _synthesize_string(schema, settings)
    if kind in ("number", "integer"):
        return _synthesize_number(schema, kind)
    if kind == "boolean":
        return True
    return None


def synthesize_json(
    node: Mapping[str, Any] | None,
    dictionary: Mapping[str, Any] | None = None,
    *,
    settings: EngineSettings | None = None,
) -> str:
    """Synthesize a value and render it as indented JSON body text."""
    value = synthesize(node, dictionary, settings=settings)
    if value is None:
        return "{}"
    return json.dumps(value, indent=2, ensure_ascii=False)


def _merge_all_of(
    branches: list[Any],
    dictionary: Mapping[str, Any],
    depth: int,
    settings: EngineSettings,
) -> Any:
    merged: dict[str, Any] = {}
    fallback: Any = None
    for sub in branches:
        part = synthesize(sub, dictionary, depth + 1, settings=settings)
        if isinstance(part, dict):
            merged.update(part)
        elif part is not None:
            fallback = part
    if merged or fallback is None:
        return merged
    return fallback


def _synthesize_object(
    schema: Mapping[str, Any],
    dictionary: Mapping[str, Any],
    depth: int,
    settings: EngineSettings,
) -> dict[str, Any]:
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return {}
    required = set(string_list(schema.get("required")))
    return {
        key: synthesize(prop, dictionary, depth + 1, settings=settings)
        for key, prop in properties.items()
        if key in required
    }


def _synthesize_array(
    schema: Mapping[str, Any],
    dictionary: Mapping[str, Any],
    depth: int,
    settings: EngineSettings,
) -> list[Any]:
    items = schema.get("items")
    if not isinstance(items, Mapping):
        return []
    item = synthesize(items, dictionary, depth + 1, settings=settings)
    min_items = schema.get("minItems")
    count = min_items if isinstance(min_items, int) and min_items > 1 else 1
    return [copy.deepcopy(item) for _ in range(count)]


def _synthesize_string(schema: Mapping[str, Any], settings: EngineSettings) -> str:
    fmt = schema.get("format")
    if fmt == "date-time":
        return (
            datetime.now(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )
    if fmt == "date":
        return datetime.now(timezone.utc).date().isoformat()
    if fmt == "email":
        return settings.example_email
    if fmt in ("uri", "url"):
        return settings.example_url
    if fmt == "uuid":
        return NIL_UUID

    value = settings.placeholder_string
    min_length = schema.get("minLength")
    if isinstance(min_length, int) and len(value) < min_length:
        repeats = -(-min_length // len(value))
        value = (value * repeats)[:min_length]
    max_length = schema.get("maxLength")
    if isinstance(max_length, int) and max_length >= 0 and len(value) > max_length:
        value = value[:max_length]
    return value


def _synthesize_number(schema: Mapping[str, Any], kind: str) -> int | float:
    step = 1 if kind == "integer" else 0.5
    minimum = schema.get("minimum")
    maximum = schema.get("maximum")
    exclusive_min = schema.get("exclusiveMinimum")
    exclusive_max = schema.get("exclusiveMaximum")

    # OpenAPI 3.1 spells exclusive bounds as numbers, 3.0 as booleans.
    if _is_number(exclusive_min):
        return exclusive_min + step
    if _is_number(minimum):
        return minimum + step if exclusive_min is True else minimum
    if _is_number(exclusive_max):
        return exclusive_max - step
    if _is_number(maximum):
        return maximum - step if exclusive_max is True else maximum
    return 1 if kind == "integer" else 1.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


__all__ = ["NIL_UUID", "synthesize", "synthesize_json"]
