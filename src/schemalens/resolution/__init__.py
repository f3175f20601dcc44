"""Resolution context - pointers and composition.

The Resolution context is responsible for:
- Following same-document ``$ref`` pointers to concrete schema nodes
- Detecting dangling and circular pointers
- Merging ``allOf`` sub-schemas
- Selecting a representative branch from ``anyOf``/``oneOf``

Core abstractions:
- ResolvedSchema: Concrete shape plus nullable/variant/unresolved flags
- UnresolvedRef: Marker for a pointer that could not be followed
"""

from schemalens.resolution.composition import resolve, variant_label
from schemalens.resolution.models import ResolvedSchema, UnresolvedRef
from schemalens.resolution.pointer import (
    is_local_pointer,
    is_reference,
    lookup,
    pointer_name,
    resolve_pointer,
)

__all__ = [
    "ResolvedSchema",
    "UnresolvedRef",
    "resolve",
    "resolve_pointer",
    "variant_label",
    "is_local_pointer",
    "is_reference",
    "lookup",
    "pointer_name",
]
