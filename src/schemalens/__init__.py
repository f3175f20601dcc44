"""schemalens - Schema resolution and example synthesis for OpenAPI.

Turns raw, possibly malformed or self-referential schema descriptions into
display-ready shapes, form-field lists, example values and validators.

Quick Start:
    from schemalens import load_document, resolve, synthesize, project

    doc = load_document("openapi.yaml")
    pet = doc.schema_node("Pet")

    resolved = resolve(pet, doc.raw)
    example = synthesize(pet, doc.raw)
    fields = project(pet, dictionary=doc.raw)
"""

from __future__ import annotations

# Configuration
from schemalens.config import EngineSettings, get_settings, load_settings

# Spec documents
from schemalens.document import (
    Endpoint,
    EndpointGroup,
    SpecDocument,
    group_by_tag,
    load_document,
    parse_document,
    parse_endpoints,
    substitute_server_variables,
)

# Errors
from schemalens.errors import (
    ConfigError,
    ErrorCode,
    ReferenceNotFoundError,
    SchemaLensError,
    SchemaValidationError,
    SpecLoadError,
)

# Forms
from schemalens.forms import (
    BodyType,
    FieldCategory,
    FormField,
    body_content_type,
    detect_body_type,
    example_body,
    extract_form_fields,
    normalize_shape,
    project,
)

# Rendering
from schemalens.rendering import PropertyView, SchemaView, build_view, print_schema, render_tree

# Resolution
from schemalens.resolution import (
    ResolvedSchema,
    UnresolvedRef,
    resolve,
    resolve_pointer,
)

# Synthesis
from schemalens.synthesis import (
    SchemaValidator,
    ValidationReport,
    build_validator,
    synthesize,
    synthesize_json,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "EngineSettings",
    "get_settings",
    "load_settings",
    # Spec documents
    "Endpoint",
    "EndpointGroup",
    "SpecDocument",
    "group_by_tag",
    "load_document",
    "parse_document",
    "parse_endpoints",
    "substitute_server_variables",
    # Errors
    "SchemaLensError",
    "ErrorCode",
    "SpecLoadError",
    "ReferenceNotFoundError",
    "ConfigError",
    "SchemaValidationError",
    # Resolution
    "ResolvedSchema",
    "UnresolvedRef",
    "resolve",
    "resolve_pointer",
    # Synthesis
    "synthesize",
    "synthesize_json",
    "SchemaValidator",
    "ValidationReport",
    "build_validator",
    # Forms
    "BodyType",
    "FieldCategory",
    "FormField",
    "project",
    "normalize_shape",
    "body_content_type",
    "detect_body_type",
    "example_body",
    "extract_form_fields",
    # Rendering
    "SchemaView",
    "PropertyView",
    "build_view",
    "render_tree",
    "print_schema",
]
