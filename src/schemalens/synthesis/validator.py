"""Runtime validation of payloads against a schema.

A schema is compiled once into a pydantic type (dynamic models for objects,
constrained scalars for primitives) and wrapped in a TypeAdapter. Failures
are reported as best-effort hints rather than raised, unless the caller
asks for :meth:`SchemaValidator.check`.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Annotated, Any, ForwardRef, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StrictBool,
    TypeAdapter,
    ValidationError,
    create_model,
)

from schemalens.config import EngineSettings, get_settings
from schemalens.errors import ErrorCode, SchemaValidationError
from schemalens.resolution.composition import resolve
from schemalens.resolution.keywords import composition_branches, is_null_schema
from schemalens.resolution.models import ResolvedSchema, UnresolvedRef
from schemalens.resolution.pointer import is_reference, resolve_pointer

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_NAME_RE = re.compile(r"[^0-9A-Za-z_]")


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating one value.

    Attributes:
        valid: True when the value conforms.
        hints: ``"location: message"`` strings, one per violation.
    """

    valid: bool
    hints: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.valid


class SchemaValidator:
    """Validates values against a compiled schema.

    Example::

        validator = build_validator({"$ref": "#/components/schemas/Pet"}, spec)
        report = validator.validate({"name": "Rex"})
        if not report:
            print(report.hints)
    """

    def __init__(self, annotation: Any, name: str = "payload") -> None:
        self.annotation = annotation
        self.name = name
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    def validate(self, value: Any) -> ValidationReport:
        try:
            self._adapter.validate_python(value)
        except ValidationError as exc:
            return ValidationReport(valid=False, hints=_hints(exc))
        return ValidationReport(valid=True)

    def validate_json(self, text: str) -> ValidationReport:
        """Parse JSON text first; malformed JSON is reported as a hint."""
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            return ValidationReport(valid=False, hints=(f"body: invalid JSON ({exc.msg})",))
        return self.validate(value)

    def check(self, value: Any) -> None:
        """Raise SchemaValidationError when the value does not conform."""
        report = self.validate(value)
        if not report.valid:
            raise SchemaValidationError(
                f"{self.name} does not match schema ({len(report.hints)} issue(s))",
                hints=report.hints,
                error_code=ErrorCode.INVALID_PAYLOAD,
            )


def build_validator(
    node: Mapping[str, Any] | ResolvedSchema | None,
    dictionary: Mapping[str, Any] | None = None,
    *,
    settings: EngineSettings | None = None,
    name: str = "payload",
) -> SchemaValidator:
    """Compile a schema into a SchemaValidator.

    Each ``$ref`` pointer is compiled once. A pointer met again while its own
    object model is still being built becomes a forward reference, and the
    models are rebuilt once compilation finishes, so recursive schemas
    validate to any depth.

    Args:
        node: Raw schema node, reference, or an already resolved schema.
        dictionary: The full document pointers are relative to.
        settings: Engine settings; ``synthesis_max_depth`` bounds inline
            nesting, past which values are accepted unchecked.
        name: Label used in raised errors.
    """
    compiler = _Compiler(dictionary if dictionary is not None else {}, settings or get_settings())
    annotation = compiler.compile(node, 0)
    compiler.rebuild_models()
    return SchemaValidator(annotation, name=name)


class _Compiler:
    def __init__(self, dictionary: Mapping[str, Any], settings: EngineSettings) -> None:
        self.dictionary = dictionary
        self.settings = settings
        self._models: list[type[BaseModel]] = []
        # pointer -> compiled annotation
        self._compiled: dict[str, Any] = {}
        # pointer -> forward reference name, or None when it cannot recurse
        self._pending: dict[str, str | None] = {}
        self._namespace: dict[str, Any] = {}
        self._refs = 0

    def compile(self, node: Any, depth: int) -> Any:
        if depth > self.settings.synthesis_max_depth:
            return Any
        if isinstance(node, ResolvedSchema):
            return self._compile_resolved(node, depth)
        if not isinstance(node, Mapping):
            return Any
        if not is_reference(node):
            return self._compile_node(node, depth, None)

        pointer = node["$ref"]
        if pointer in self._compiled:
            return self._compiled[pointer]
        if pointer in self._pending:
            ref_name = self._pending[pointer]
            return ForwardRef(ref_name) if ref_name else Any

        self._pending[pointer] = None
        try:
            annotation = self._compile_node(node, 0, pointer)
        finally:
            ref_name = self._pending.pop(pointer)
        if ref_name:
            self._namespace[ref_name] = annotation
        self._compiled[pointer] = annotation
        return annotation

    def rebuild_models(self) -> None:
        """Resolve forward references left by recursive pointers."""
        if not self._namespace:
            return
        for model in self._models:
            model.model_rebuild(_types_namespace=self._namespace)

    def _compile_node(self, node: Mapping[str, Any], depth: int, pointer: str | None) -> Any:
        target = resolve_pointer(node, self.dictionary, self.settings)
        if isinstance(target, UnresolvedRef) or not isinstance(target, Mapping):
            return Any

        # Variants are validated as a union, unlike display which picks one.
        if not composition_branches(target, "allOf"):
            for keyword in ("anyOf", "oneOf"):
                branches = composition_branches(target, keyword)
                if branches:
                    members = tuple(
                        type(None) if is_null_schema(b) else self.compile(b, depth + 1)
                        for b in branches
                    )
                    if Any in members:
                        return Any
                    return Union[members] if len(members) > 1 else members[0]

        schema = resolve(node, self.dictionary, settings=self.settings, depth=depth)
        if pointer is not None and _is_model(schema):
            self._refs += 1
            self._pending[pointer] = f"Ref{self._refs}"
        return self._compile_resolved(schema, depth)

    def _compile_resolved(self, schema: ResolvedSchema, depth: int) -> Any:
        if schema.is_unresolved or schema.depth_exceeded:
            return Any
        annotation = self._base_type(schema, depth)
        if schema.nullable and annotation is not Any:
            return Optional[annotation]
        return annotation

    def _base_type(self, schema: ResolvedSchema, depth: int) -> Any:
        if schema.const is not None:
            return _literal((schema.const,))
        if schema.enum:
            return _literal(schema.enum)

        kind = schema.kind
        if kind is None and schema.has_properties:
            kind = "object"
        elif kind is None and schema.items is not None:
            kind = "array"

        if kind == "object":
            return self._object_model(schema, depth)
        if kind == "array":
            item = self.compile(schema.items, depth + 1) if schema.items is not None else Any
            return Annotated[
                list[item],  # type: ignore[valid-type]
                Field(min_length=schema.min_items, max_length=schema.max_items),
            ]
        if kind == "string":
            return _string_type(schema)
        if kind == "integer":
            return Annotated[int, Strict(), _bounds(schema)]
        if kind == "number":
            return Annotated[float, Strict(), _bounds(schema)]
        if kind == "boolean":
            return StrictBool
        if kind == "null":
            return type(None)
        return Any

    def _object_model(self, schema: ResolvedSchema, depth: int) -> Any:
        if not schema.has_properties:
            return dict[str, Any]

        required = set(schema.required)
        fields: dict[str, Any] = {}
        for index, (key, prop) in enumerate(schema.properties.items()):
            annotation = self.compile(prop, depth + 1)
            if key in required:
                fields[f"field_{index}"] = (annotation, Field(alias=key))
            else:
                fields[f"field_{index}"] = (Optional[annotation], Field(default=None, alias=key))

        model_name = _NAME_RE.sub("_", schema.title or "") or "Object"
        model = create_model(
            f"{model_name}{len(self._models) + 1}",
            __config__=ConfigDict(extra="allow"),
            **fields,
        )
        self._models.append(model)
        return model


def _is_model(schema: ResolvedSchema) -> bool:
    if schema.is_unresolved or schema.depth_exceeded:
        return False
    if schema.const is not None or schema.enum:
        return False
    return schema.kind in (None, "object") and schema.has_properties


def _literal(values: tuple[Any, ...]) -> Any:
    try:
        hash(values)
    except TypeError:
        return Any
    return Literal[values]


def _bounds(schema: ResolvedSchema) -> Any:
    def number(value: Any) -> float | None:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return None

    constraints: dict[str, Any] = {}
    if number(schema.exclusive_minimum) is not None:
        constraints["gt"] = schema.exclusive_minimum
    elif number(schema.minimum) is not None:
        constraints["gt" if schema.exclusive_minimum is True else "ge"] = schema.minimum
    if number(schema.exclusive_maximum) is not None:
        constraints["lt"] = schema.exclusive_maximum
    elif number(schema.maximum) is not None:
        constraints["lt" if schema.exclusive_maximum is True else "le"] = schema.maximum
    return Field(**constraints)


def _string_type(schema: ResolvedSchema) -> Any:
    checks: list[Any] = [Strict(), Field(min_length=schema.min_length, max_length=schema.max_length)]

    if schema.pattern:
        checks.append(AfterValidator(_pattern_check(schema.pattern)))

    format_check = _FORMAT_CHECKS.get(schema.format or "")
    if format_check is not None:
        checks.append(AfterValidator(format_check))

    return Annotated[(str, *checks)]


def _pattern_check(pattern: str) -> Callable[[str], str]:
    try:
        compiled = re.compile(pattern)
    except re.error:
        logger.debug("Ignoring uncompilable pattern %r", pattern)
        return lambda value: value

    def check(value: str) -> str:
        if compiled.search(value) is None:
            raise ValueError(f"does not match pattern {pattern!r}")
        return value

    return check


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError("not a valid email address")
    return value


def _check_uuid(value: str) -> str:
    try:
        uuid.UUID(value)
    except ValueError as exc:
        raise ValueError("not a valid UUID") from exc
    return value


def _check_datetime(value: str) -> str:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError("not an ISO-8601 date-time") from exc
    return value


def _check_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("not an ISO-8601 date") from exc
    return value


def _check_uri(value: str) -> str:
    parsed = urlparse(value)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise ValueError("not an absolute URI")
    return value


_FORMAT_CHECKS: dict[str, Callable[[str], str]] = {
    "email": _check_email,
    "uuid": _check_uuid,
    "date-time": _check_datetime,
    "date": _check_date,
    "uri": _check_uri,
    "url": _check_uri,
}


def _hints(exc: ValidationError) -> tuple[str, ...]:
    hints = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "body"
        hints.append(f"{location}: {err['msg']}")
    return tuple(hints)


__all__ = ["SchemaValidator", "ValidationReport", "build_validator"]
