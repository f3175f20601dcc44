"""Same-document pointer resolution.

Only local pointers (``#/...``) are ever followed. Absolute URLs and
relative file references are reported as unresolved so resolution can
never reach outside the document it was given.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import unquote

from schemalens.config import EngineSettings, get_settings
from schemalens.resolution.models import UnresolvedRef

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "#/"


def is_reference(node: Any) -> bool:
    return isinstance(node, Mapping) and isinstance(node.get("$ref"), str)


def is_local_pointer(pointer: str) -> bool:
    return isinstance(pointer, str) and pointer.startswith(LOCAL_PREFIX)


def pointer_name(pointer: str) -> str:
    """Last segment of a pointer, used as a display name."""
    tail = pointer.rstrip("/").rsplit("/", 1)[-1]
    return _decode_segment(tail) or pointer


def _decode_segment(segment: str) -> str:
    return unquote(segment).replace("~1", "/").replace("~0", "~")


def lookup(pointer: str, dictionary: Mapping[str, Any]) -> Any | None:
    """Walk a local pointer through the document.

    Returns the target node, or ``None`` when any segment is missing.
    """
    if not is_local_pointer(pointer):
        return None

    current: Any = dictionary
    for raw in pointer[len(LOCAL_PREFIX):].split("/"):
        segment = _decode_segment(raw)
        if isinstance(current, Mapping):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, str):
            if not segment.isdigit() or int(segment) >= len(current):
                return None
            current = current[int(segment)]
        else:
            return None
    return current


def resolve_pointer(
    node: Any,
    dictionary: Mapping[str, Any],
    settings: EngineSettings | None = None,
) -> Any:
    """Follow ``$ref`` hops until a concrete node is reached.

    Args:
        node: Raw schema node, possibly a reference.
        dictionary: The full document the pointers are relative to.
        settings: Engine settings (hop ceiling).

    Returns:
        The concrete node, the input unchanged when it is not a reference,
        or an :class:`UnresolvedRef` marker. Never raises.
    """
    settings = settings or get_settings()
    seen: set[str] = set()
    current = node

    while is_reference(current):
        pointer = current["$ref"]
        if not is_local_pointer(pointer):
            logger.debug("Refusing non-local pointer %s", pointer)
            return UnresolvedRef(pointer_name(pointer), pointer, "external")
        if pointer in seen:
            logger.debug("Circular pointer chain at %s", pointer)
            return UnresolvedRef(pointer_name(pointer), pointer, "circular")
        if len(seen) >= settings.max_pointer_hops:
            logger.debug("Pointer chain exceeded %d hops at %s", settings.max_pointer_hops, pointer)
            return UnresolvedRef(pointer_name(pointer), pointer, "too-deep")
        seen.add(pointer)

        target = lookup(pointer, dictionary)
        if not isinstance(target, Mapping):
            logger.debug("Dangling pointer %s", pointer)
            return UnresolvedRef(pointer_name(pointer), pointer, "missing")
        current = target

    return current


__all__ = [
    "is_local_pointer",
    "is_reference",
    "lookup",
    "pointer_name",
    "resolve_pointer",
]
