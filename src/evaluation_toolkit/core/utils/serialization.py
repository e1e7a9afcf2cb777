"""
Serialization Utilities

Provides to/from JSON utilities for the core data models.

- `serialize_*` and `deserialize_*` functions wrap the models'
  `to_dict()` / `from_dict()` methods
- Validation runs before deserialization
- Calculated values (section points, totals) are never stored
- order_index is rewritten from list position on save
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..models.categories import Category
from ..models.documents import Document
from ..schemas.validator import (
    DOCUMENT_SCHEMA_VERSION,
    ValidationError,
    validate_category,
    validate_document,
)


# ─────────────────────────────────────────────────────────────────────────────
# Document Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_document(document: Document) -> dict[str, Any]:
    """
    Serialize a Document to a dictionary.

    Questions are renumbered so order_index matches their position.

    Args:
        document: Document instance to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    renumbered = tuple(
        replace(q, order_index=i) for i, q in enumerate(document.questions)
    )
    data = replace(document, questions=renumbered).to_dict()
    data["schema_version"] = DOCUMENT_SCHEMA_VERSION
    return data


def deserialize_document(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> Document:
    """
    Deserialize a Document from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate before parsing
        strict: Use full JSON Schema validation

    Returns:
        Document instance

    Raises:
        ValidationError: If data is invalid or violates model invariants
    """
    if validate:
        validate_document(data, strict=strict)

    try:
        return Document.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Cannot parse document: {e}", errors=[str(e)]) from e


# ─────────────────────────────────────────────────────────────────────────────
# Category Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_category(category: Category) -> dict[str, Any]:
    return category.to_dict()


def deserialize_category(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> Category:
    """
    Deserialize a Category from a dictionary.

    Raises:
        ValidationError: If data is invalid
    """
    if validate:
        validate_category(data, strict=strict)

    try:
        return Category.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Cannot parse category: {e}", errors=[str(e)]) from e


# ─────────────────────────────────────────────────────────────────────────────
# JSON File Utilities
# ─────────────────────────────────────────────────────────────────────────────

def load_document_json(path: Path, *, strict: bool = False) -> Document:
    """
    Load a document from a JSON file.

    Args:
        path: Path to the document JSON
        strict: Use full JSON Schema validation

    Returns:
        Document instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If the file is not valid JSON or not a valid document
    """
    if not path.exists():
        raise FileNotFoundError(f"Document file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Invalid JSON in {path.name}: {e}",
            path=str(path),
            errors=[str(e)]
        ) from e

    return deserialize_document(data, strict=strict)


def save_document_json(document: Document, path: Path) -> None:
    """
    Save a document to a JSON file.

    Args:
        document: Document to save
        path: Output path
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_document(document), f, indent=2, ensure_ascii=False)
