"""Projection of object schemas into flat form-field lists.

Upstream schemas are not always well formed: request bodies arrive without
a ``properties`` wrapper, or as a bare mapping of property definitions.
:func:`normalize_shape` maps all of these onto one properties map so that no
property key is ever dropped.

Category inference walks three ordered tiers and stops at the first one
that gives an informative answer:

1. explicit ``format``
2. explicit ``type`` (``string`` alone is not informative)
3. a heuristic on the property name
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from schemalens.config import EngineSettings, get_settings
from schemalens.forms.models import FieldCategory, FormField
from schemalens.resolution.composition import resolve
from schemalens.resolution.keywords import (
    META_KEYWORDS,
    explicit_example,
    has_composition,
    has_value,
    schema_kind,
    string_list,
)
from schemalens.resolution.models import ResolvedSchema, UnresolvedRef
from schemalens.resolution.pointer import is_reference, resolve_pointer

logger = logging.getLogger(__name__)

FORMAT_CATEGORIES: dict[str, FieldCategory] = {
    "binary": FieldCategory.FILE,
    "base64": FieldCategory.FILE,
    "email": FieldCategory.EMAIL,
    "phone": FieldCategory.TEL,
    "tel": FieldCategory.TEL,
    "uri": FieldCategory.URL,
    "url": FieldCategory.URL,
    "uuid": FieldCategory.TEXT,
}

TYPE_CATEGORIES: dict[str, FieldCategory] = {
    "boolean": FieldCategory.CHECKBOX,
    "number": FieldCategory.NUMBER,
    "integer": FieldCategory.NUMBER,
    "file": FieldCategory.FILE,
}

# Ordered: the first matching hint wins.
NAME_HINTS: tuple[tuple[tuple[str, ...], FieldCategory], ...] = (
    (("file", "upload", "attachment", "image", "document"), FieldCategory.FILE),
    (("email", "mail"), FieldCategory.EMAIL),
    (("phone", "tel"), FieldCategory.TEL),
    (("url", "website", "link"), FieldCategory.URL),
    (("count", "quantity", "amount"), FieldCategory.NUMBER),
)
FLAG_WORDS = ("enable", "disable")
FLAG_PREFIXES = ("is", "has", "should")

_STRING_KEYWORDS = frozenset({"$ref", "format", "pattern", "title", "description"})
_LIST_KEYWORDS = frozenset({"required", "enum", "allOf", "anyOf", "oneOf"})


def normalize_shape(schema: Any) -> dict[str, Any]:
    """Return the properties map of a possibly loosely shaped schema.

    - a ``properties`` mapping is used as-is
    - ``None`` or a non-mapping yields an empty map
    - a mapping with no schema keywords whose values include property
      definitions is itself treated as the properties map; a key only
      counts as a keyword when its value has that keyword's shape
    - anything else yields an empty map
    """
    if isinstance(schema, ResolvedSchema):
        return dict(schema.properties)
    if not isinstance(schema, Mapping):
        return {}

    properties = schema.get("properties")
    if isinstance(properties, Mapping) and _is_keyword_use("properties", properties):
        return dict(properties)

    if _looks_like_properties(schema):
        logger.debug("Treating schema without 'properties' wrapper as a properties map")
        return dict(schema)

    return {}


def _looks_like_properties(schema: Mapping[str, Any]) -> bool:
    if any(_is_keyword_use(key, value) for key, value in schema.items()):
        return False
    return any(isinstance(value, Mapping) for value in schema.values())


def _is_keyword_use(key: str, value: Any) -> bool:
    """True when ``value`` has the shape ``key`` takes as a schema keyword.

    A field that happens to be called ``type`` or ``format`` holds a
    property definition, not a string, so it does not count.
    """
    if key in _STRING_KEYWORDS:
        return isinstance(value, str)
    if key in _LIST_KEYWORDS:
        return isinstance(value, list)
    if key == "type":
        return isinstance(value, str) or (
            isinstance(value, list) and all(isinstance(name, str) for name in value)
        )
    if key == "nullable":
        return isinstance(value, bool)
    if key in META_KEYWORDS:
        # properties, items, additionalProperties, const, discriminator
        return not _is_definition(value)
    return False


def _is_definition(value: Any) -> bool:
    return isinstance(value, Mapping) and any(
        _is_keyword_use(key, inner) for key, inner in value.items()
    )


def infer_category(key: str, prop: Mapping[str, Any] | ResolvedSchema | None) -> FieldCategory:
    """Infer the input control category for one property."""
    if isinstance(prop, ResolvedSchema):
        fmt, kind = prop.format, prop.kind
    elif isinstance(prop, Mapping):
        fmt, kind = prop.get("format"), schema_kind(prop)
    else:
        fmt, kind = None, None

    if isinstance(fmt, str) and fmt in FORMAT_CATEGORIES:
        return FORMAT_CATEGORIES[fmt]
    if kind in TYPE_CATEGORIES:
        return TYPE_CATEGORIES[kind]
    return category_from_name(key)


def category_from_name(key: str) -> FieldCategory:
    """Name-based fallback used when format and type are uninformative."""
    lowered = (key or "").lower()
    for needles, category in NAME_HINTS:
        if any(needle in lowered for needle in needles):
            return category
    if lowered.startswith(FLAG_PREFIXES) or any(word in lowered for word in FLAG_WORDS):
        return FieldCategory.CHECKBOX
    return FieldCategory.TEXT


def field_value(prop: Mapping[str, Any] | ResolvedSchema | None) -> str:
    """Prefilled string value from a property's example or default."""
    if prop is None:
        return ""
    raw = explicit_example(prop)
    if not has_value(raw):
        raw = prop.default if isinstance(prop, ResolvedSchema) else prop.get("default")
    return stringify(raw)


def stringify(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (Mapping, list, tuple)):
        return json.dumps(raw, separators=(",", ":"), ensure_ascii=False)
    return str(raw)


def project(
    schema: Mapping[str, Any] | ResolvedSchema | None,
    required_from_parent: Iterable[str] = (),
    *,
    dictionary: Mapping[str, Any] | None = None,
    settings: EngineSettings | None = None,
) -> list[FormField]:
    """Project an object schema into an ordered list of FormFields.

    Args:
        schema: Object schema, reference, composed schema, resolved schema,
            or a loose mapping of property definitions.
        required_from_parent: Extra required names declared by the caller,
            e.g. on an enclosing request body.
        dictionary: The full document, for resolving references.
        settings: Engine settings.

    Returns:
        One FormField per discoverable property, in declaration order.
    """
    settings = settings or get_settings()
    dictionary = dictionary if dictionary is not None else {}

    if isinstance(schema, Mapping) and (is_reference(schema) or has_composition(schema)):
        schema = resolve(schema, dictionary, settings=settings)
        if schema.is_unresolved:
            logger.debug("Projecting unresolved schema %s as empty", schema.unresolved_ref)

    properties = normalize_shape(schema)
    if isinstance(schema, ResolvedSchema):
        own_required: tuple[str, ...] = schema.required
    elif isinstance(schema, Mapping) and isinstance(schema.get("properties"), Mapping):
        own_required = string_list(schema.get("required"))
    else:
        own_required = ()
    required = set(own_required) | set(required_from_parent)

    fields: list[FormField] = []
    for key, prop in properties.items():
        raw = resolve_pointer(prop, dictionary, settings) if isinstance(prop, Mapping) else None
        if isinstance(raw, UnresolvedRef):
            raw = None
        resolved = resolve(prop, dictionary, settings=settings) if isinstance(prop, Mapping) else None

        fields.append(
            FormField(
                key=str(key),
                value=field_value(resolved),
                category=infer_category(str(key), resolved),
                required=key in required or (isinstance(raw, Mapping) and raw.get("required") is True),
                description=resolved.description if resolved is not None else None,
            )
        )
    return fields


__all__ = [
    "category_from_name",
    "field_value",
    "infer_category",
    "normalize_shape",
    "project",
    "stringify",
]
