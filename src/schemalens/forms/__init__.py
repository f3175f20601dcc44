"""Forms context - form-field projection and request-body helpers."""

from schemalens.forms.models import BodyType, FieldCategory, FormField
from schemalens.forms.operations import (
    body_content_type,
    detect_body_type,
    example_body,
    extract_form_fields,
    request_body_schema,
)
from schemalens.forms.projection import (
    category_from_name,
    infer_category,
    normalize_shape,
    project,
)

__all__ = [
    "BodyType",
    "FieldCategory",
    "FormField",
    "project",
    "normalize_shape",
    "infer_category",
    "category_from_name",
    "body_content_type",
    "detect_body_type",
    "example_body",
    "extract_form_fields",
    "request_body_schema",
]
