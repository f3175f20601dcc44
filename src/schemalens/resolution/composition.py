"""Composition resolution: ``allOf`` merging and ``anyOf``/``oneOf`` selection.

``allOf`` is merged into a single shape. Scalar keywords from later
sub-schemas overwrite earlier ones, ``properties`` merge key-wise with later
definitions winning, and ``required`` only ever accumulates.

``anyOf``/``oneOf`` have no runtime value to test branches against, so the
first non-null branch is the shape. A ``type: null`` branch marks the result
nullable, and when several non-null branches exist their labels are kept for
display.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from schemalens.config import EngineSettings, get_settings
from schemalens.resolution.keywords import (
    COMPOSITION_KEYWORDS,
    build_resolved,
    composition_branches,
    is_null_schema,
    schema_kind,
    string_list,
)
from schemalens.resolution.models import ResolvedSchema, UnresolvedRef
from schemalens.resolution.pointer import is_reference, pointer_name, resolve_pointer

logger = logging.getLogger(__name__)

SchemaInput = Mapping[str, Any] | ResolvedSchema | None


def resolve(
    node: SchemaInput,
    dictionary: Mapping[str, Any] | None = None,
    *,
    settings: EngineSettings | None = None,
    depth: int = 0,
    active: frozenset[str] = frozenset(),
) -> ResolvedSchema:
    """Resolve a raw schema node into a ResolvedSchema.

    Args:
        node: Raw schema node or reference. An existing ResolvedSchema is
            returned unchanged.
        dictionary: The full document pointers are relative to.
        settings: Engine settings (depth ceilings).
        depth: Current nesting depth, threaded through ``allOf`` and variant
            recursion.
        active: Pointers already being resolved further up this call chain.
            Meeting one again stops with ``depth_exceeded`` set.

    Returns:
        A fresh ResolvedSchema. Dangling pointers yield one with
        ``unresolved_ref`` set; hitting the depth ceiling yields one with
        ``depth_exceeded`` set.
    """
    if isinstance(node, ResolvedSchema):
        return node

    settings = settings or get_settings()
    dictionary = dictionary if dictionary is not None else {}

    if depth > settings.resolve_max_depth:
        logger.debug("Composition depth ceiling %d reached", settings.resolve_max_depth)
        return ResolvedSchema(depth_exceeded=True)

    if not isinstance(node, Mapping):
        return ResolvedSchema()

    if is_reference(node):
        pointer = node["$ref"]
        if pointer in active:
            logger.debug("Composition cycle at %s", pointer)
            return ResolvedSchema(depth_exceeded=True)
        active = active | {pointer}

    target = resolve_pointer(node, dictionary, settings)
    if isinstance(target, UnresolvedRef):
        return ResolvedSchema(unresolved_ref=target.name)
    if not isinstance(target, Mapping):
        return ResolvedSchema()

    if composition_branches(target, "allOf"):
        return _merge_all_of(target, dictionary, settings, depth, active)

    for keyword in ("anyOf", "oneOf"):
        branches = composition_branches(target, keyword)
        if branches:
            return _select_variant(branches, dictionary, settings, depth, active)

    return build_resolved(target)


def _merge_all_of(
    node: Mapping[str, Any],
    dictionary: Mapping[str, Any],
    settings: EngineSettings,
    depth: int,
    active: frozenset[str],
) -> ResolvedSchema:
    merged: dict[str, Any] = {
        k: v for k, v in node.items() if k not in COMPOSITION_KEYWORDS
    }
    properties: dict[str, Any] = dict(merged.pop("properties", None) or {})
    required: list[str] = list(string_list(merged.pop("required", None)))
    nullable = False
    variant_labels: tuple[str, ...] | None = None
    unresolved: str | None = None

    for sub in composition_branches(node, "allOf"):
        resolved = resolve(sub, dictionary, settings=settings, depth=depth + 1, active=active)
        if resolved.is_unresolved:
            unresolved = resolved.unresolved_ref
            continue
        if resolved.depth_exceeded:
            continue

        shape = resolved.to_schema()
        sub_properties = shape.pop("properties", None)
        sub_required = shape.pop("required", None)
        merged.update(shape)

        if sub_properties:
            properties.update(sub_properties)
        for name in string_list(sub_required):
            if name not in required:
                required.append(name)

        nullable = nullable or resolved.nullable
        if resolved.variant_labels:
            variant_labels = resolved.variant_labels

    if properties:
        merged["properties"] = properties
    if required:
        merged["required"] = required

    return build_resolved(
        merged,
        nullable=nullable,
        variant_labels=variant_labels,
        unresolved_ref=unresolved,
    )


def _select_variant(
    branches: list[Any],
    dictionary: Mapping[str, Any],
    settings: EngineSettings,
    depth: int,
    active: frozenset[str],
) -> ResolvedSchema:
    has_null = any(is_null_schema(branch) for branch in branches)
    non_null = [branch for branch in branches if not is_null_schema(branch)]

    if not non_null:
        return ResolvedSchema(kind="null")

    primary = resolve(non_null[0], dictionary, settings=settings, depth=depth + 1, active=active)

    labels = primary.variant_labels
    if len(non_null) > 1:
        labels = tuple(variant_label(branch) for branch in non_null)

    return replace(primary, nullable=primary.nullable or has_null, variant_labels=labels)


def variant_label(branch: Any) -> str:
    """Display label for one ``anyOf``/``oneOf`` branch."""
    if is_reference(branch):
        return pointer_name(branch["$ref"])
    if isinstance(branch, Mapping):
        return schema_kind(branch) or "object"
    return "object"


__all__ = ["resolve", "variant_label"]
