"""Form field descriptors handed to the request-builder UI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldCategory(Enum):
    """Input control category for a form field."""

    TEXT = "text"
    FILE = "file"
    CHECKBOX = "checkbox"
    EMAIL = "email"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"


class BodyType(Enum):
    """Request body encoding selected for a try-it request."""

    JSON = "json"
    FORM_DATA = "form-data"
    URLENCODED = "x-www-form-urlencoded"
    BINARY = "binary"
    NONE = "none"

    @property
    def is_form(self) -> bool:
        return self in (BodyType.FORM_DATA, BodyType.URLENCODED)


@dataclass(frozen=True)
class FormField:
    """A single UI-agnostic input field.

    Attributes:
        key: Property or parameter name.
        value: Prefilled value. Always a string, matching form submission.
        category: Inferred input control category.
        required: Whether the field must be filled in.
        description: Help text from the schema, if any.
    """

    key: str
    value: str = ""
    category: FieldCategory = FieldCategory.TEXT
    required: bool = False
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "category": self.category.value,
            "required": self.required,
            "description": self.description,
        }
