"""Rendering adapter - display views and rich trees for resolved schemas."""

from schemalens.rendering.console import print_schema, render_tree
from schemalens.rendering.tree import (
    PropertyView,
    SchemaView,
    build_view,
    constraint_badges,
    property_type_label,
)

__all__ = [
    "PropertyView",
    "SchemaView",
    "build_view",
    "constraint_badges",
    "property_type_label",
    "print_schema",
    "render_tree",
]
