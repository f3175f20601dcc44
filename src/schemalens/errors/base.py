"""Custom exception hierarchy for schemalens.

The resolution engine itself never raises: dangling pointers, loose shapes
and runaway recursion are all encoded in return values. Exceptions are
reserved for the outer layers, such as loading a document from disk, reading
configuration, or asking a validator to enforce a schema.

All schemalens errors inherit from SchemaLensError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with source/pointer details
- suggestions: List of actionable steps to resolve the issue
- docs_url: Link to relevant documentation

Example:
    try:
        document = load_document("openapi.yaml")
    except SpecLoadError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DOCS_BASE_URL = "https://schemalens.dev/docs"


class ErrorCode(Enum):
    """Standardized error codes for schemalens.

    Error codes are organized by category:
    - E0xx: Document loading errors
    - E1xx: Configuration errors
    - E2xx: Validation errors
    - E9xx: Unknown/internal errors
    """

    # Document loading errors (E0xx)
    DOCUMENT_NOT_FOUND = "E001"
    DOCUMENT_PARSE_FAILED = "E002"
    DOCUMENT_INVALID = "E003"
    REFERENCE_NOT_FOUND = "E004"

    # Configuration errors (E1xx)
    INVALID_CONFIG = "E101"
    CONFIG_NOT_FOUND = "E102"

    # Validation errors (E2xx)
    VALIDATION_FAILED = "E201"
    INVALID_PAYLOAD = "E202"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 100:
            return "document"
        elif code_num < 200:
            return "config"
        elif code_num < 300:
            return "validation"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context for error logging and debugging.

    Attributes:
        source: File path or label of the document involved.
        pointer: Schema pointer being processed (e.g. ``#/components/schemas/Pet``).
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    source: str | None = None
    pointer: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "source": self.source,
            "pointer": self.pointer,
            "extra": self.extra or None,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.source:
            parts.append(f"source={self.source}")
        if self.pointer:
            parts.append(f"pointer={self.pointer}")
        return " > ".join(parts) if parts else "unknown location"


class SchemaLensError(Exception):
    """Base exception for all schemalens errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with source details
        suggestions: List of actionable steps to resolve the issue
        docs_url: Link to relevant documentation
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []
    docs_path: str = "errors/overview"

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    @property
    def docs_url(self) -> str:
        """Get the documentation URL for this error type."""
        return f"{DOCS_BASE_URL}/{self.docs_path}"

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        lines.append("")
        lines.append(f"Learn more: {self.docs_url}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "docs_url": self.docs_url,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class SpecLoadError(SchemaLensError):
    """An API description could not be read or parsed.

    Raised by the document loader for missing files, malformed JSON/YAML,
    or documents whose root is not a mapping.
    """

    error_code = ErrorCode.DOCUMENT_PARSE_FAILED
    default_message = "Failed to load API description"
    default_suggestions = [
        "Check that the file exists and is readable",
        "Validate the document with a JSON or YAML linter",
        "Make sure the document root is an object, not a list or scalar",
    ]
    docs_path = "errors/documents"


class ReferenceNotFoundError(SpecLoadError):
    """A schema named on the command line does not exist in the document."""

    error_code = ErrorCode.REFERENCE_NOT_FOUND
    default_message = "Schema reference not found in document"
    default_suggestions = [
        "List available schemas with 'schemalens endpoints <spec>'",
        "Use a full pointer such as '#/components/schemas/Pet'",
    ]


class ConfigError(SchemaLensError):
    """Configuration file or environment values are invalid."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid schemalens configuration"
    default_suggestions = [
        "Check the YAML syntax of the configuration file",
        "Depth limits must be positive integers",
        "Environment overrides use the SCHEMALENS_ prefix",
    ]
    docs_path = "errors/configuration"


class SchemaValidationError(SchemaLensError):
    """A value does not conform to its schema.

    Attributes:
        hints: Best-effort ``"location: message"`` strings describing
            each violation.
    """

    error_code = ErrorCode.VALIDATION_FAILED
    default_message = "Value does not match schema"
    docs_path = "errors/validation"

    def __init__(
        self,
        message: str | None = None,
        hints: list[str] | tuple[str, ...] = (),
        **kwargs: Any,
    ) -> None:
        self.hints = tuple(hints)
        super().__init__(message, **kwargs)

    @property
    def suggestions(self) -> list[str]:
        if self._suggestions is not None:
            return self._suggestions
        return list(self.hints)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["hints"] = list(self.hints)
        return result
