"""
Module: builder

Purpose:
    Build pipeline that turns an evaluation Document into print-ready,
    paginated A4 PDFs: a teacher copy with model answers and a student
    copy with prompts or ruled answer lines.

Key Functions:
    - paginate_document(): Page assignment without rendering
    - build_document(): Main entry point for PDF generation

Key Classes:
    - BuilderConfig: Configuration for building
    - RenderMode: Teacher or student copy
    - BuildResult / BuildError

Dependencies:
    - reportlab: Measurement and PDF generation
    - fitz (PyMuPDF): Previews

Used By:
    - evaluation_toolkit.__main__: CLI
"""

from .config import BuilderConfig
from .layout import PageGeometry, RenderMode, Typography
from .controller import BuildError, BuildResult, build_document, paginate_document

__all__ = [
    # Config
    "BuilderConfig",
    "PageGeometry",
    "RenderMode",
    "Typography",
    # Pipeline
    "build_document",
    "paginate_document",
    "BuildResult",
    "BuildError",
]
