"""
Module: storage.repository

Purpose:
    File-backed persistence for evaluations and categories. Implements the
    load/save collaborator the layout pipeline consumes; nothing in the
    builder touches the disk through this module during pagination.

    Layout on disk:
        <root>/documents/<document_id>.json
        <root>/categories.json

Key Classes:
    - DocumentRepository: CRUD for documents and categories
    - StorageError, DocumentNotFoundError, CategoryNotFoundError

Dependencies:
    - storage.file_locking: portalocker-based locked JSON access
    - core.utils.serialization: Document/Category (de)serialization

Used By:
    - evaluation_toolkit.__main__: CLI "--store" option
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from evaluation_toolkit.core.models import Category, Document
from evaluation_toolkit.core.schemas import ValidationError
from evaluation_toolkit.core.utils.serialization import (
    deserialize_category,
    deserialize_document,
    serialize_category,
    serialize_document,
)

from .file_locking import (
    locked_read_json,
    locked_read_modify_write_json,
    locked_write_json,
)

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class StorageError(Exception):
    """Error reading or writing the document store."""
    pass


class DocumentNotFoundError(StorageError):
    """No document with the requested id."""
    pass


class CategoryNotFoundError(StorageError):
    """No category with the requested id."""
    pass


class DocumentRepository:
    """
    JSON document store rooted at a directory.

    Example:
        >>> repo = DocumentRepository(Path("workspace/store"))
        >>> repo.save_document(document)
        >>> repo.load_document(document.id) == document
        True
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.documents_dir = self.root / "documents"
        self.categories_path = self.root / "categories.json"

    # ─────────────────────────────────────────────────────────────────────────
    # Documents
    # ─────────────────────────────────────────────────────────────────────────

    def load_document(self, document_id: str) -> Document:
        """
        Load a document by id.

        Raises:
            DocumentNotFoundError: If no such document exists
            StorageError: If the stored file cannot be parsed
        """
        path = self._document_path(document_id)
        if not path.exists():
            raise DocumentNotFoundError(f"Document not found: {document_id}")

        try:
            data = locked_read_json(path)
            return deserialize_document(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Corrupt document {document_id}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read document {document_id}: {e}") from e

    def save_document(self, document: Document) -> None:
        """
        Persist a document, replacing any previous version.

        Raises:
            StorageError: If the file cannot be written
        """
        path = self._document_path(document.id)
        try:
            locked_write_json(path, serialize_document(document))
        except OSError as e:
            raise StorageError(f"Cannot write document {document.id}: {e}") from e
        logger.info(f"Saved document {document.id} ({document.question_count} questions)")

    def delete_document(self, document_id: str) -> None:
        """
        Delete a document.

        Raises:
            DocumentNotFoundError: If no such document exists
        """
        path = self._document_path(document_id)
        if not path.exists():
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        path.unlink()
        logger.info(f"Deleted document {document_id}")

    def list_documents(self) -> List[Document]:
        """
        Load every stored document, ordered by title then id.

        Unreadable files are skipped with a warning so one corrupt document
        does not hide the rest.
        """
        if not self.documents_dir.exists():
            return []

        documents = []
        for path in sorted(self.documents_dir.glob("*.json")):
            try:
                documents.append(self.load_document(path.stem))
            except StorageError as e:
                logger.warning(f"Skipping {path.name}: {e}")
        documents.sort(key=lambda d: (d.title.lower(), d.id))
        return documents

    def _document_path(self, document_id: str) -> Path:
        if not document_id or not _SAFE_ID.match(document_id):
            raise StorageError(f"Invalid document id: {document_id!r}")
        return self.documents_dir / f"{document_id}.json"

    # ─────────────────────────────────────────────────────────────────────────
    # Categories
    # ─────────────────────────────────────────────────────────────────────────

    def list_categories(self) -> List[Category]:
        """Load all categories in stored order."""
        try:
            raw = locked_read_json(self.categories_path, default=list)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt categories file: {e}") from e
        try:
            return [deserialize_category(item) for item in raw]
        except ValidationError as e:
            raise StorageError(f"Corrupt category entry: {e}") from e

    def get_category(self, category_id: str) -> Optional[Category]:
        """Find a category by id, or None."""
        if not category_id:
            return None
        return next((c for c in self.list_categories() if c.id == category_id), None)

    def save_category(self, category: Category) -> None:
        """Insert or update a category (matched by id)."""
        entry = serialize_category(category)

        def upsert(existing: list) -> list:
            if any(c.get("id") == category.id for c in existing):
                return [entry if c.get("id") == category.id else c for c in existing]
            return existing + [entry]

        locked_read_modify_write_json(self.categories_path, upsert, default=list)
        logger.info(f"Saved category {category.id} ({category.name})")

    def delete_category(self, category_id: str) -> None:
        """
        Delete a category.

        Documents referencing it keep their category_id; it simply no
        longer resolves and rendering falls back to the default color.

        Raises:
            CategoryNotFoundError: If no such category exists
        """
        removed = []

        def remove(existing: list) -> list:
            kept = [c for c in existing if c.get("id") != category_id]
            removed.extend(c for c in existing if c.get("id") == category_id)
            return kept

        locked_read_modify_write_json(self.categories_path, remove, default=list)
        if not removed:
            raise CategoryNotFoundError(f"Category not found: {category_id}")
        logger.info(f"Deleted category {category_id}")
