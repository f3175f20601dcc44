"""schemalens error handling module."""

from schemalens.errors.base import (
    ConfigError,
    ErrorCode,
    ErrorContext,
    ReferenceNotFoundError,
    SchemaLensError,
    SchemaValidationError,
    SpecLoadError,
)

__all__ = [
    "SchemaLensError",
    "ErrorCode",
    "ErrorContext",
    "SpecLoadError",
    "ReferenceNotFoundError",
    "ConfigError",
    "SchemaValidationError",
]
