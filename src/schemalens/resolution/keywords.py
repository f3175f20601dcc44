"""Keyword helpers shared by resolution, synthesis, projection and rendering."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from schemalens.resolution.models import KEYWORD_ATTRIBUTES, ResolvedSchema

COMPOSITION_KEYWORDS = ("allOf", "anyOf", "oneOf")

# Keywords that mark a mapping as a schema rather than a bare properties map.
META_KEYWORDS = frozenset(
    {
        "$ref",
        "type",
        "properties",
        "items",
        "required",
        "allOf",
        "anyOf",
        "oneOf",
        "additionalProperties",
        "format",
        "enum",
        "const",
        "nullable",
        "discriminator",
    }
)

_KEYWORD_TO_ATTRIBUTE = {keyword: attr for attr, keyword in KEYWORD_ATTRIBUTES.items()}
_STRUCTURAL = frozenset({"properties", "required", "items", *COMPOSITION_KEYWORDS, "$ref"})

_MISSING = object()


def schema_kind(node: Mapping[str, Any]) -> str | None:
    """Return the declared primitive type of a raw node.

    An OpenAPI 3.1 type list (``["string", "null"]``) yields its first
    non-null entry.
    """
    declared = node.get("type")
    if isinstance(declared, str):
        return declared
    if isinstance(declared, Sequence) and not isinstance(declared, str):
        names = [t for t in declared if isinstance(t, str)]
        non_null = [t for t in names if t != "null"]
        if non_null:
            return non_null[0]
        if names:
            return "null"
    return None


def effective_kind(node: Mapping[str, Any]) -> str | None:
    """Declared type, or ``object``/``array`` inferred from structure."""
    kind = schema_kind(node)
    if kind is not None:
        return kind
    if isinstance(node.get("properties"), Mapping):
        return "object"
    if "items" in node:
        return "array"
    return None


def is_null_schema(node: Any) -> bool:
    """True for a concrete (non-reference) node typed ``null``."""
    return (
        isinstance(node, Mapping)
        and "$ref" not in node
        and schema_kind(node) == "null"
    )


def has_composition(node: Any) -> bool:
    return isinstance(node, Mapping) and any(
        isinstance(node.get(k), Sequence) and not isinstance(node.get(k), str)
        for k in COMPOSITION_KEYWORDS
    )


def composition_branches(node: Mapping[str, Any], keyword: str) -> list[Any]:
    branches = node.get(keyword)
    if isinstance(branches, Sequence) and not isinstance(branches, str):
        return list(branches)
    return []


def explicit_example(node: Mapping[str, Any] | ResolvedSchema) -> Any:
    """Return the first explicit literal (``const``, ``example``, ``examples``).

    Keyed OpenAPI ``examples`` maps yield their first entry, unwrapping an
    Example Object's ``value``. Returns the module sentinel when nothing
    usable is declared; see :func:`has_value`.
    """
    if isinstance(node, ResolvedSchema):
        const, example, examples = node.const, node.example, node.examples
    else:
        const, example, examples = node.get("const"), node.get("example"), node.get("examples")

    if const is not None:
        return const
    if example is not None:
        return example
    if isinstance(examples, Mapping):
        for entry in examples.values():
            if isinstance(entry, Mapping) and "value" in entry:
                entry = entry["value"]
            if entry is not None:
                return entry
            break
    elif isinstance(examples, Sequence) and not isinstance(examples, str):
        for entry in examples:
            if entry is not None:
                return entry
            break
    return _MISSING


def has_value(value: Any) -> bool:
    return value is not _MISSING


def string_list(value: Any) -> tuple[str, ...]:
    """Normalize a ``required`` keyword into a duplicate-free tuple."""
    if not isinstance(value, Sequence) or isinstance(value, str):
        return ()
    seen: dict[str, None] = {}
    for item in value:
        if isinstance(item, str):
            seen.setdefault(item, None)
    return tuple(seen)


def build_resolved(
    node: Mapping[str, Any],
    *,
    nullable: bool = False,
    variant_labels: tuple[str, ...] | None = None,
    unresolved_ref: str | None = None,
) -> ResolvedSchema:
    """Build a ResolvedSchema from a concrete node's own keywords.

    Composition keywords and ``$ref`` are dropped; the caller is expected to
    have eliminated them already.
    """
    attributes: dict[str, Any] = {}
    extras: dict[str, Any] = {}

    for key, value in node.items():
        if key in _STRUCTURAL:
            continue
        attr = _KEYWORD_TO_ATTRIBUTE.get(key)
        if attr is None:
            extras[key] = value
        elif attr == "kind":
            attributes[attr] = schema_kind(node)
        elif attr == "enum":
            if isinstance(value, Sequence) and not isinstance(value, str):
                attributes[attr] = tuple(value)
        else:
            attributes[attr] = value

    properties = node.get("properties")
    return ResolvedSchema(
        **attributes,
        properties=MappingProxyType(dict(properties)) if isinstance(properties, Mapping) else MappingProxyType({}),
        required=string_list(node.get("required")),
        items=node.get("items"),
        extras=MappingProxyType(extras),
        nullable=nullable,
        variant_labels=variant_labels,
        unresolved_ref=unresolved_ref,
    )
