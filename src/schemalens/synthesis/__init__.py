"""Synthesis context - example values and runtime validators for schemas."""

from schemalens.synthesis.validator import SchemaValidator, ValidationReport, build_validator
from schemalens.synthesis.values import NIL_UUID, synthesize, synthesize_json

__all__ = [
    "synthesize",
    "synthesize_json",
    "NIL_UUID",
    "SchemaValidator",
    "ValidationReport",
    "build_validator",
]
