"""
Evaluation Toolkit Core Package

Shared data models, schema validation and serialization. These models are
the single source of truth for storage and for the layout pipeline.
"""

from .models import Category, Question, Document, Section

__all__ = [
    "Category",
    "Question",
    "Document",
    "Section",
]
