"""Display views of resolved schemas for the documentation tree.

A view is a nested, presentation-ready description of a schema: type
labels, constraint badges, required markers and nested property lists.
Building it resolves each level lazily and stops at the render depth
ceiling with a "max depth" marker, so cyclic schemas render finitely.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from schemalens.config import EngineSettings, get_settings
from schemalens.resolution.composition import resolve
from schemalens.resolution.keywords import schema_kind
from schemalens.resolution.models import ResolvedSchema
from schemalens.resolution.pointer import is_reference, pointer_name


@dataclass(frozen=True)
class PropertyView:
    """One row of a property list."""

    name: str
    type_label: str
    required: bool = False
    nullable: bool = False
    constraints: tuple[str, ...] = ()
    description: str | None = None
    unresolved_ref: str | None = None
    children: SchemaView | None = None


@dataclass(frozen=True)
class SchemaView:
    """A schema prepared for display.

    Exactly one presentation applies, checked in this order:
    ``max_depth_reached``, ``unresolved_ref``, ``items`` (array),
    ``properties`` (object), otherwise a primitive with ``type_label``.
    """

    kind: str | None = None
    type_label: str = "any"
    nullable: bool = False
    variant_labels: tuple[str, ...] | None = None
    constraints: tuple[str, ...] = ()
    description: str | None = None
    properties: tuple[PropertyView, ...] = ()
    items: SchemaView | None = None
    unresolved_ref: str | None = None
    max_depth_reached: bool = False


def constraint_badges(schema: ResolvedSchema) -> tuple[str, ...]:
    """Short constraint chips: format, pattern, bounds, lengths, enum."""
    badges: list[str] = []
    if schema.format:
        badges.append(str(schema.format))
    if schema.pattern:
        badges.append(f"/{schema.pattern}/")
    if schema.minimum is not None:
        badges.append(f"min: {schema.minimum}")
    if schema.maximum is not None:
        badges.append(f"max: {schema.maximum}")
    if schema.min_length is not None:
        badges.append(f"minLen: {schema.min_length}")
    if schema.max_length is not None:
        badges.append(f"maxLen: {schema.max_length}")
    for value in schema.enum or ():
        badges.append(json.dumps(value, ensure_ascii=False, default=str))
    return tuple(badges)


def property_type_label(schema: ResolvedSchema) -> str:
    """Type column text for a property row (``array[Pet]``, ``string``...)."""
    if schema.is_unresolved:
        return "unresolved"
    if schema.kind == "array":
        items = schema.items
        if items is None:
            return "array"
        if is_reference(items):
            return f"array[{pointer_name(items['$ref'])}]"
        if isinstance(items, Mapping):
            return f"array[{schema_kind(items) or 'object'}]"
        return "array[object]"
    if schema.variant_labels:
        return " | ".join(schema.variant_labels)
    return schema.kind or "object"


def build_view(
    node: Mapping[str, Any] | ResolvedSchema | None,
    dictionary: Mapping[str, Any] | None = None,
    *,
    required: Iterable[str] = (),
    settings: EngineSettings | None = None,
    depth: int = 0,
) -> SchemaView:
    """Build a display view for a schema.

    Args:
        node: Raw schema node, reference or resolved schema.
        dictionary: The full document pointers are relative to.
        required: Extra required names from the caller (for example a
            request body that lists required form fields separately).
        settings: Engine settings; ``render_max_depth`` bounds nesting.
        depth: Current nesting depth.
    """
    settings = settings or get_settings()
    dictionary = dictionary if dictionary is not None else {}

    if depth >= settings.render_max_depth:
        return SchemaView(max_depth_reached=True)

    resolved = resolve(node, dictionary, settings=settings)
    if resolved.is_unresolved:
        return SchemaView(unresolved_ref=resolved.unresolved_ref)
    if resolved.depth_exceeded:
        return SchemaView(max_depth_reached=True)

    if resolved.kind == "array" and resolved.items is not None:
        return SchemaView(
            kind="array",
            type_label=property_type_label(resolved),
            nullable=resolved.nullable,
            description=resolved.description,
            items=build_view(resolved.items, dictionary, settings=settings, depth=depth + 1),
        )

    if resolved.has_properties:
        required_names = dict.fromkeys([*resolved.required, *required])
        rows = tuple(
            _property_view(name, prop, name in required_names, dictionary, settings, depth)
            for name, prop in resolved.properties.items()
        )
        return SchemaView(
            kind=resolved.kind or "object",
            type_label=resolved.kind or "object",
            nullable=resolved.nullable,
            description=resolved.description,
            properties=rows,
        )

    return SchemaView(
        kind=resolved.kind,
        type_label=resolved.type_label,
        nullable=resolved.nullable,
        variant_labels=resolved.variant_labels,
        constraints=constraint_badges(resolved),
        description=resolved.description,
    )


def _property_view(
    name: str,
    prop: Any,
    required: bool,
    dictionary: Mapping[str, Any],
    settings: EngineSettings,
    depth: int,
) -> PropertyView:
    resolved = resolve(prop, dictionary, settings=settings)
    children = None
    has_children = resolved.has_properties or resolved.kind == "array"
    if has_children and depth < settings.render_max_depth - 1:
        children = build_view(resolved, dictionary, settings=settings, depth=depth + 1)

    return PropertyView(
        name=str(name),
        type_label=property_type_label(resolved),
        required=required,
        nullable=resolved.nullable,
        constraints=constraint_badges(resolved),
        description=resolved.description,
        unresolved_ref=resolved.unresolved_ref,
        children=children,
    )


__all__ = [
    "PropertyView",
    "SchemaView",
    "build_view",
    "constraint_badges",
    "property_type_label",
]
