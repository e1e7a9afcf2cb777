"""
Schema Validation Utilities

Validates JSON data for documents and categories before deserialization.

Two levels:
- Basic checks (always): required fields, types of the values the layout
  pipeline depends on. Cheap and gives precise error paths.
- Strict checks (strict=True): full JSON Schema validation against the
  bundled ``*.schema.json`` files.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import jsonschema


# Schema version written by the serializer
DOCUMENT_SCHEMA_VERSION = 1


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_document(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate document data.

    Args:
        data: Document dictionary to validate
        strict: If True, also validate against document.schema.json

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("document must be an object")

    required = ["id", "title", "questions"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )

    if not isinstance(data["title"], str):
        raise ValidationError(
            f"title must be a string: {data['title']!r}",
            path="title"
        )

    version = data.get("schema_version", DOCUMENT_SCHEMA_VERSION)
    if version != DOCUMENT_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported document schema version: {version} (expected {DOCUMENT_SCHEMA_VERSION})",
            path="schema_version"
        )

    questions = data["questions"]
    if not isinstance(questions, list):
        raise ValidationError("questions must be a list", path="questions")

    seen: set[str] = set()
    for i, question in enumerate(questions):
        path = f"questions[{i}]"
        _validate_question(question, path)
        qid = str(question["id"])
        if qid in seen:
            raise ValidationError(f"Duplicate question id: {qid!r}", path=f"{path}.id")
        seen.add(qid)

    if strict:
        _validate_with_schema(data, "document")


def _validate_question(data: Any, path: str) -> None:
    """Validate a single question entry."""
    if not isinstance(data, dict):
        raise ValidationError("question must be an object", path=path)

    required = ["id", "question_text"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Question missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing]
        )

    if not isinstance(data["question_text"], str):
        raise ValidationError(
            "question_text must be a string",
            path=f"{path}.question_text"
        )

    points = data.get("points")
    if points is not None:
        if isinstance(points, bool) or not isinstance(points, (int, float)):
            raise ValidationError(
                f"Invalid points: {points!r} (must be a number)",
                path=f"{path}.points"
            )
        if not math.isfinite(points) or points < 0:
            raise ValidationError(
                f"Invalid points: {points} (must be non-negative)",
                path=f"{path}.points"
            )

    for field in ("teacher_answer", "student_prompt", "section_name"):
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            raise ValidationError(
                f"{field} must be a string or null",
                path=f"{path}.{field}"
            )


def validate_category(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate category data.

    Args:
        data: Category dictionary to validate
        strict: If True, also validate against category.schema.json

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("category must be an object")

    required = ["id", "name"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            errors=[f"Missing field: {f}" for f in missing]
        )

    if strict:
        _validate_with_schema(data, "category")


def _validate_with_schema(data: dict[str, Any], schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message]
        ) from e
