"""
Module: storage

Purpose:
    Persistence for evaluations and categories: the load/save collaborator
    of the layout pipeline. JSON files guarded by portalocker locks.

Key Classes:
    - DocumentRepository: load_document()/save_document() and category CRUD

Dependencies:
    - portalocker: Cross-platform file locking
    - evaluation_toolkit.core: Models and serialization
"""

from .repository import (
    DocumentRepository,
    StorageError,
    DocumentNotFoundError,
    CategoryNotFoundError,
)

__all__ = [
    "DocumentRepository",
    "StorageError",
    "DocumentNotFoundError",
    "CategoryNotFoundError",
]
