"""
Core Models Package

Immutable, validated data models shared by storage and the builder.

All models are frozen dataclasses: the layout pipeline never mutates a
Document, it derives new FlatItems from it on every run. Section totals and
document totals are calculated, never stored.
"""

from .categories import Category, DEFAULT_CATEGORY_COLOR, contrast_color
from .questions import Question, OTHER_SECTION, DEFAULT_POINTS, resolve_section_name
from .documents import Document, Section

__all__ = [
    "Category",
    "DEFAULT_CATEGORY_COLOR",
    "contrast_color",
    "Question",
    "OTHER_SECTION",
    "DEFAULT_POINTS",
    "resolve_section_name",
    "Document",
    "Section",
]
