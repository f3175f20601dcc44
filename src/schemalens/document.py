"""SpecDocument - a loaded OpenAPI 3.x or Swagger 2.0 description.

The core engine only needs the raw mapping (the "dictionary" pointers are
resolved against). This module adds the outer conveniences: loading from
JSON or YAML, the endpoint list with merged parameters, tag grouping, the
schema catalog and server URL templating.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from schemalens.errors import (
    ErrorCode,
    ErrorContext,
    ReferenceNotFoundError,
    SpecLoadError,
)
from schemalens.resolution.models import UnresolvedRef
from schemalens.resolution.pointer import lookup, resolve_pointer

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "options", "head", "trace")
DEFAULT_TAG = "Reference"

_SERVER_VARIABLE = re.compile(r"\{([^}]+)\}")


@dataclass(frozen=True)
class Endpoint:
    """A single operation on a single path.

    Attributes:
        path: URL path template (e.g., "/pets/{petId}").
        method: HTTP method in uppercase.
        operation: The raw operation object, with ``parameters`` replaced by
            the merged path-level and operation-level list.
        summary: Short description from the document.
        operation_id: The operationId, if present.
        tags: Tags for grouping; ``("Reference",)`` when none are declared.
    """

    path: str
    method: str
    operation: Mapping[str, Any] = field(default_factory=dict)
    summary: str | None = None
    operation_id: str | None = None
    tags: tuple[str, ...] = (DEFAULT_TAG,)

    @property
    def parameters(self) -> list[Mapping[str, Any]]:
        return list(self.operation.get("parameters") or [])

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


@dataclass(frozen=True)
class EndpointGroup:
    """Endpoints sharing their first tag."""

    tag: str
    endpoints: tuple[Endpoint, ...]

    @property
    def count(self) -> int:
        return len(self.endpoints)


def _merge_parameters(
    path_params: Iterable[Any],
    op_params: Iterable[Any],
    document: Mapping[str, Any],
) -> list[Mapping[str, Any]]:
    merged: dict[tuple[str, str], Mapping[str, Any]] = {}
    for param in [*path_params, *op_params]:
        target = resolve_pointer(param, document)
        if isinstance(target, UnresolvedRef) or not isinstance(target, Mapping):
            logger.debug("Skipping unresolvable parameter %r", param)
            continue
        merged[(str(target.get("name", "")), str(target.get("in", "")))] = target
    return list(merged.values())


def parse_endpoints(document: Mapping[str, Any]) -> list[Endpoint]:
    """Parse every operation under ``paths``.

    Path-level parameters are merged with operation-level ones, keyed by
    ``(name, in)``; the operation-level definition wins.
    """
    paths = document.get("paths")
    if not isinstance(paths, Mapping):
        return []

    endpoints: list[Endpoint] = []
    for path, path_item in paths.items():
        if not isinstance(path_item, Mapping):
            continue
        path_params = path_item.get("parameters") or []

        for method in HTTP_METHODS:
            op = path_item.get(method)
            if not isinstance(op, Mapping):
                continue

            operation = dict(op)
            operation["parameters"] = _merge_parameters(path_params, op.get("parameters") or [], document)
            tags = tuple(str(t) for t in op.get("tags") or ()) or (DEFAULT_TAG,)

            endpoints.append(
                Endpoint(
                    path=str(path),
                    method=method.upper(),
                    operation=operation,
                    summary=op.get("summary"),
                    operation_id=op.get("operationId"),
                    tags=tags,
                )
            )
    return endpoints


def group_by_tag(endpoints: Iterable[Endpoint]) -> list[EndpointGroup]:
    """Group endpoints by their first tag, sorted by tag name."""
    grouped: dict[str, list[Endpoint]] = {}
    for endpoint in endpoints:
        tag = endpoint.tags[0] if endpoint.tags else DEFAULT_TAG
        grouped.setdefault(tag, []).append(endpoint)
    return [EndpointGroup(tag=tag, endpoints=tuple(eps)) for tag, eps in sorted(grouped.items())]


def substitute_server_variables(url: str, variables: Mapping[str, Any] | None) -> str:
    """Replace ``{name}`` placeholders with declared defaults.

    Only defaults declared by the document are substituted; placeholders
    without a matching variable are left intact.
    """
    variables = variables or {}

    def replace(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, Mapping) and variable.get("default") is not None:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(replace, url)


@dataclass
class SpecDocument:
    """Parsed API description.

    Example::

        doc = load_document("openapi.yaml")
        for ep in doc.endpoints:
            print(ep, ep.tags)
        pet = doc.schema_node("Pet")

    Attributes:
        raw: The full document mapping; pass it as ``dictionary`` to the
            engine.
        title: API title.
        version: API version.
        endpoints: All parsed endpoints.
        schemas: Named schemas from ``components/schemas`` or, for
            Swagger 2.0, ``definitions``.
        servers: Server URLs with variables substituted.
    """

    raw: dict[str, Any]
    title: str = "API"
    version: str = ""
    endpoints: list[Endpoint] = field(default_factory=list)
    schemas: dict[str, Any] = field(default_factory=dict)
    servers: list[str] = field(default_factory=list)
    source: str | None = None

    @property
    def is_swagger2(self) -> bool:
        return "swagger" in self.raw and "openapi" not in self.raw

    @property
    def groups(self) -> list[EndpointGroup]:
        return group_by_tag(self.endpoints)

    def find_endpoint(self, method: str, path: str) -> Endpoint | None:
        """Find the endpoint for a method and path template."""
        method = method.upper()
        for endpoint in self.endpoints:
            if endpoint.method == method and endpoint.path == path:
                return endpoint
        return None

    def schema_pointer(self, ref: str) -> str:
        """Turn a bare schema name into a local pointer.

        ``"Pet"`` becomes ``"#/components/schemas/Pet"`` (or
        ``"#/definitions/Pet"`` for Swagger 2.0). Pointers pass through.
        """
        if ref.startswith("#"):
            return ref
        base = "#/definitions/" if self.is_swagger2 else "#/components/schemas/"
        return base + ref.replace("~", "~0").replace("/", "~1")

    def schema_node(self, ref: str) -> dict[str, Any]:
        """Return a reference node for a named schema or pointer.

        Raises:
            ReferenceNotFoundError: If nothing exists at the pointer.
        """
        pointer = self.schema_pointer(ref)
        if lookup(pointer, self.raw) is None:
            raise ReferenceNotFoundError(
                f"No schema at {pointer}",
                context=ErrorContext(source=self.source, pointer=pointer),
                available=sorted(self.schemas)[:20],
            )
        return {"$ref": pointer}


def _schema_catalog(document: Mapping[str, Any]) -> dict[str, Any]:
    components = document.get("components")
    if isinstance(components, Mapping) and isinstance(components.get("schemas"), Mapping):
        return dict(components["schemas"])
    definitions = document.get("definitions")
    if isinstance(definitions, Mapping):
        return dict(definitions)
    return {}


def _server_urls(document: Mapping[str, Any]) -> list[str]:
    urls: list[str] = []
    for server in document.get("servers") or []:
        if isinstance(server, Mapping) and server.get("url"):
            urls.append(substitute_server_variables(str(server["url"]), server.get("variables")))
    if not urls and document.get("host"):
        scheme = (document.get("schemes") or ["https"])[0]
        urls.append(f"{scheme}://{document['host']}{document.get('basePath', '')}")
    return urls


def parse_document(document: Mapping[str, Any], source: str | None = None) -> SpecDocument:
    """Build a SpecDocument from an in-memory mapping.

    Raises:
        SpecLoadError: If the document is not a mapping.
    """
    if not isinstance(document, Mapping):
        raise SpecLoadError(
            f"Document root must be an object, got {type(document).__name__}",
            error_code=ErrorCode.DOCUMENT_INVALID,
            context=ErrorContext(source=source),
        )

    info = document.get("info") if isinstance(document.get("info"), Mapping) else {}
    raw = dict(document)
    return SpecDocument(
        raw=raw,
        title=str(info.get("title", "API")),
        version=str(info.get("version", "")),
        endpoints=parse_endpoints(raw),
        schemas=_schema_catalog(raw),
        servers=_server_urls(raw),
        source=source,
    )


def load_document(path: str | Path) -> SpecDocument:
    """Load an API description from a JSON or YAML file.

    Raises:
        SpecLoadError: If the file is missing, cannot be parsed, or its root
            is not an object.
    """
    filepath = Path(path)
    context = ErrorContext(source=str(filepath))

    if not filepath.is_file():
        raise SpecLoadError(
            f"API description not found: {filepath}",
            error_code=ErrorCode.DOCUMENT_NOT_FOUND,
            context=context,
        )

    try:
        content = filepath.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(
            f"Could not read {filepath}: {e}",
            error_code=ErrorCode.DOCUMENT_NOT_FOUND,
            context=context,
            cause=e,
        ) from e
    except UnicodeDecodeError as e:
        raise SpecLoadError(
            f"{filepath.name} is not valid UTF-8: {e}",
            error_code=ErrorCode.DOCUMENT_PARSE_FAILED,
            context=context,
            cause=e,
        ) from e

    try:
        if filepath.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            # YAML is a superset of JSON, so unknown suffixes go through it too
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SpecLoadError(
            f"Could not parse {filepath.name}: {e}",
            error_code=ErrorCode.DOCUMENT_PARSE_FAILED,
            context=context,
            cause=e,
        ) from e

    logger.debug("Loaded API description from %s", filepath)
    return parse_document(data, source=str(filepath))


__all__ = [
    "DEFAULT_TAG",
    "Endpoint",
    "EndpointGroup",
    "HTTP_METHODS",
    "SpecDocument",
    "group_by_tag",
    "load_document",
    "parse_document",
    "parse_endpoints",
    "substitute_server_variables",
]
