"""Request-body helpers for a single operation.

Bridges an operation object (OpenAPI 3.x or Swagger 2.0) to the core
engine: which encoding to use, which schema describes the body, the form
fields for form encodings and the prefilled JSON text otherwise.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from schemalens.config import EngineSettings, get_settings
from schemalens.forms.models import BodyType, FormField
from schemalens.forms.projection import infer_category, project, stringify
from schemalens.resolution.keywords import string_list
from schemalens.resolution.models import UnresolvedRef
from schemalens.resolution.pointer import resolve_pointer
from schemalens.synthesis.values import synthesize_json

FORM_DATA = "multipart/form-data"
URLENCODED = "application/x-www-form-urlencoded"

_CONTENT_TYPES: dict[BodyType, str] = {
    BodyType.JSON: "application/json",
    BodyType.FORM_DATA: FORM_DATA,
    BodyType.URLENCODED: URLENCODED,
    BodyType.BINARY: "application/octet-stream",
    BodyType.NONE: "",
}


def body_content_type(body_type: BodyType) -> str:
    """Map a body type to its Content-Type header value."""
    return _CONTENT_TYPES[body_type]


def _deref(node: Any, document: Mapping[str, Any], settings: EngineSettings) -> Mapping[str, Any] | None:
    target = resolve_pointer(node, document, settings)
    if isinstance(target, UnresolvedRef) or not isinstance(target, Mapping):
        return None
    return target


def _request_body(
    operation: Mapping[str, Any], document: Mapping[str, Any], settings: EngineSettings
) -> Mapping[str, Any] | None:
    body = operation.get("requestBody")
    if body is None:
        return None
    return _deref(body, document, settings)


def _parameters(
    operation: Mapping[str, Any], document: Mapping[str, Any], settings: EngineSettings
) -> list[Mapping[str, Any]]:
    params = []
    for param in operation.get("parameters") or []:
        resolved = _deref(param, document, settings)
        if resolved is not None:
            params.append(resolved)
    return params


def _consumes(operation: Mapping[str, Any], document: Mapping[str, Any]) -> list[str]:
    consumes = operation.get("consumes", document.get("consumes"))
    return [c for c in consumes or [] if isinstance(c, str)]


def _body_type_from_media(media_type: str) -> BodyType | None:
    if "json" in media_type:
        return BodyType.JSON
    if "form-data" in media_type:
        return BodyType.FORM_DATA
    if "x-www-form-urlencoded" in media_type:
        return BodyType.URLENCODED
    if "octet-stream" in media_type or "binary" in media_type:
        return BodyType.BINARY
    return None


def detect_body_type(
    operation: Mapping[str, Any] | None,
    document: Mapping[str, Any],
    *,
    settings: EngineSettings | None = None,
) -> BodyType:
    """Detect the initial body encoding for an operation.

    OpenAPI 3.x ``requestBody`` content keys are consulted first (form
    encodings preferred), then Swagger 2.0 ``formData``/``body`` parameters
    together with ``consumes``.
    """
    if not operation:
        return BodyType.NONE
    settings = settings or get_settings()

    body = _request_body(operation, document, settings)
    if body is not None:
        content = body.get("content") or {}
        if not content:
            return BodyType.NONE
        if FORM_DATA in content:
            return BodyType.FORM_DATA
        if URLENCODED in content:
            return BodyType.URLENCODED
        return _body_type_from_media(next(iter(content))) or BodyType.JSON

    params = _parameters(operation, document, settings)
    consumes = _consumes(operation, document)

    if any(p.get("in") == "formData" for p in params):
        if any("x-www-form-urlencoded" in c for c in consumes):
            return BodyType.URLENCODED
        return BodyType.FORM_DATA

    if any(p.get("in") == "body" for p in params):
        if consumes:
            return _body_type_from_media(consumes[0]) or BodyType.JSON
        return BodyType.JSON

    return BodyType.NONE


def request_body_schema(
    operation: Mapping[str, Any] | None,
    document: Mapping[str, Any],
    *,
    settings: EngineSettings | None = None,
) -> Any:
    """Return the schema describing an operation's JSON (or first) body."""
    if not operation:
        return None
    settings = settings or get_settings()

    body = _request_body(operation, document, settings)
    if body is not None:
        content = body.get("content") or {}
        for media_type, media in content.items():
            if "json" in media_type and isinstance(media, Mapping) and media.get("schema"):
                return media["schema"]
        for media in content.values():
            if isinstance(media, Mapping) and media.get("schema"):
                return media["schema"]
        return None

    for param in _parameters(operation, document, settings):
        if param.get("in") == "body" and param.get("schema"):
            return param["schema"]
    return None


def extract_form_fields(
    operation: Mapping[str, Any] | None,
    document: Mapping[str, Any],
    *,
    settings: EngineSettings | None = None,
) -> list[FormField]:
    """Build form fields for an operation sending a form-encoded body.

    Handles OpenAPI 3.x multipart/urlencoded request bodies, Swagger 2.0
    ``formData`` parameters, and a Swagger 2.0 ``body`` parameter when the
    operation consumes a form type.
    """
    if not operation:
        return []
    settings = settings or get_settings()

    schema: Any = None
    parent_required: tuple[str, ...] = ()

    body = _request_body(operation, document, settings)
    if body is not None:
        content = body.get("content") or {}
        media = content.get(FORM_DATA) or content.get(URLENCODED)
        if isinstance(media, Mapping) and media.get("schema"):
            schema = media["schema"]
            parent_required = string_list(body.get("required"))

    params = _parameters(operation, document, settings)
    form_params = [p for p in params if p.get("in") == "formData"]
    if form_params:
        return [
            FormField(
                key=str(param.get("name", "")),
                value=stringify(param.get("default")),
                category=infer_category(str(param.get("name", "")), param),
                required=bool(param.get("required", False)),
                description=param.get("description"),
            )
            for param in form_params
        ]

    if schema is None and any(
        "form-data" in c or "urlencoded" in c for c in _consumes(operation, document)
    ):
        body_param = next((p for p in params if p.get("in") == "body"), None)
        if body_param is not None and body_param.get("schema"):
            schema = body_param["schema"]

    if schema is None:
        return []
    return project(schema, parent_required, dictionary=document, settings=settings)


def example_body(
    operation: Mapping[str, Any] | None,
    document: Mapping[str, Any],
    *,
    settings: EngineSettings | None = None,
) -> str:
    """Prefilled JSON body text for an operation, or ``""`` without a body."""
    schema = request_body_schema(operation, document, settings=settings)
    if schema is None:
        return ""
    return synthesize_json(schema, document, settings=settings)


__all__ = [
    "body_content_type",
    "detect_body_type",
    "example_body",
    "extract_form_fields",
    "request_body_schema",
]
