"""
Module: builder.layout

Purpose:
    Page layout for evaluations.
    Converts a Document into measured, sized items distributed over pages.

Key Functions:
    - flatten(): Document -> ordered section/question items
    - measure_items(): Measurement pass
    - size_items(): Heights and ruled-line counts per mode
    - paginate(): Assign items to pages

Key Classes:
    - PageGeometry, Typography, RenderMode: Layout configuration
    - MeasurementOracle, ReportLabOracle: Block height measurement
    - ContentFormatter: HTML -> ReportLab flowables
    - Page, LayoutResult: Layout output

Dependencies:
    - reportlab: Text wrapping for measurement
    - bs4: HTML parsing

Used By:
    - builder.controller: Main build controller
    - builder.output.renderer: PDF drawing
"""

from .config import PageGeometry, RenderMode, Typography
from .models import (
    BlockHeights,
    FlatItem,
    LayoutResult,
    MeasurementTable,
    Page,
    QuestionItem,
    SectionItem,
)
from .content import ContentError, ContentFormatter, build_styles, stack_height
from .flattener import flatten
from .measure import BlockKind, MeasurementOracle, ReportLabOracle, measure_items
from .sizer import allocate_lines, size_items
from .paginator import paginate

__all__ = [
    # Config
    "PageGeometry",
    "RenderMode",
    "Typography",
    # Models
    "BlockHeights",
    "FlatItem",
    "LayoutResult",
    "MeasurementTable",
    "Page",
    "QuestionItem",
    "SectionItem",
    # Content
    "ContentError",
    "ContentFormatter",
    "build_styles",
    "stack_height",
    # Functions
    "flatten",
    "BlockKind",
    "MeasurementOracle",
    "ReportLabOracle",
    "measure_items",
    "allocate_lines",
    "size_items",
    "paginate",
]
