"""Value types produced by pointer and composition resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class UnresolvedRef:
    """Marker for a pointer that could not be followed.

    Attributes:
        name: Last segment of the pointer, for display (e.g. ``"Missing"``).
        pointer: The full pointer string as written in the schema.
        reason: One of ``"missing"``, ``"external"``, ``"circular"``
            or ``"too-deep"``.
    """

    name: str
    pointer: str
    reason: str = "missing"


# Maps ResolvedSchema attribute names to JSON-Schema keywords.
KEYWORD_ATTRIBUTES: dict[str, str] = {
    "kind": "type",
    "format": "format",
    "pattern": "pattern",
    "enum": "enum",
    "const": "const",
    "default": "default",
    "example": "example",
    "examples": "examples",
    "minimum": "minimum",
    "maximum": "maximum",
    "exclusive_minimum": "exclusiveMinimum",
    "exclusive_maximum": "exclusiveMaximum",
    "min_length": "minLength",
    "max_length": "maxLength",
    "min_items": "minItems",
    "max_items": "maxItems",
    "description": "description",
    "title": "title",
}


@dataclass(frozen=True)
class ResolvedSchema:
    """A concrete schema shape with references and composition eliminated.

    Child nodes (``properties`` values and ``items``) are kept raw and may
    still be references; consumers resolve them lazily as they descend,
    which keeps cyclic graphs finite.

    Attributes:
        kind: Primitive type name, or ``None`` when undeclared.
        properties: Property name to raw child schema, in declaration order.
        required: Required property names, duplicate-free, first-seen order.
        items: Raw item schema for arrays.
        extras: Keywords with no dedicated attribute (``additionalProperties``,
            ``readOnly``, vendor extensions, ...).
        nullable: True when an ``anyOf``/``oneOf`` branch was ``type: null``.
        variant_labels: One label per non-null branch when there were
            several alternatives; ``None`` otherwise.
        unresolved_ref: Name of the dangling pointer, set instead of a shape.
        depth_exceeded: True when resolution stopped at its depth ceiling.
    """

    kind: str | None = None
    format: str | None = None
    pattern: str | None = None
    enum: tuple[Any, ...] | None = None
    const: Any = None
    default: Any = None
    example: Any = None
    examples: Any = None
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: Any = None
    exclusive_maximum: Any = None
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    description: str | None = None
    title: str | None = None
    properties: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    required: tuple[str, ...] = ()
    items: Any = None
    extras: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    nullable: bool = False
    variant_labels: tuple[str, ...] | None = None
    unresolved_ref: str | None = None
    depth_exceeded: bool = False

    @property
    def is_unresolved(self) -> bool:
        return self.unresolved_ref is not None

    @property
    def has_properties(self) -> bool:
        return len(self.properties) > 0

    @property
    def type_label(self) -> str:
        """Display label: joined variants, the declared kind, or ``any``."""
        if self.variant_labels:
            return " | ".join(self.variant_labels)
        return self.kind or "any"

    def to_schema(self) -> dict[str, Any]:
        """Return the concrete shape as a plain JSON-Schema mapping."""
        schema: dict[str, Any] = {}
        for attr, keyword in KEYWORD_ATTRIBUTES.items():
            value = getattr(self, attr)
            if value is None:
                continue
            schema[keyword] = list(value) if attr == "enum" else value
        if self.properties:
            schema["properties"] = dict(self.properties)
        if self.required:
            schema["required"] = list(self.required)
        if self.items is not None:
            schema["items"] = self.items
        schema.update(self.extras)
        return schema

    def to_dict(self) -> dict[str, Any]:
        """Shape plus derived flags, for JSON output."""
        result = self.to_schema()
        if self.nullable:
            result["nullable"] = True
        if self.variant_labels:
            result["variants"] = list(self.variant_labels)
        if self.unresolved_ref is not None:
            result["unresolvedRef"] = self.unresolved_ref
        if self.depth_exceeded:
            result["maxDepthReached"] = True
        return result
