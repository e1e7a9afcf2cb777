"""
Module: builder.output.renderer

Purpose:
    Render a LayoutResult to an A4 PDF using ReportLab.
    Each Page becomes one PDF page: the header block on page 1, then every
    item at the position the paginator decided, then the footer.
    No height logic happens here; item heights are final.

Key Functions:
    - render_to_pdf(): Main rendering function

Dependencies:
    - reportlab: PDF generation
    - builder.layout: Geometry, typography, content formatting

Used By:
    - builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from reportlab.lib import colors
from reportlab.pdfgen import canvas
from reportlab.platypus import Flowable

from evaluation_toolkit.builder.layout.config import PageGeometry, RenderMode, Typography
from evaluation_toolkit.builder.layout.content import WRAP_HEIGHT, ContentFormatter
from evaluation_toolkit.builder.layout.models import LayoutResult, Page, QuestionItem, SectionItem
from evaluation_toolkit.core.models import (
    DEFAULT_CATEGORY_COLOR,
    Category,
    Document,
    contrast_color,
)

logger = logging.getLogger(__name__)

# Colors
SECTION_COLOR = colors.HexColor("#dc2626")
QUESTION_COLOR = colors.HexColor("#1e3a8a")
POINTS_COLOR = colors.HexColor("#6b7280")
ANSWER_FILL = colors.HexColor("#f0fdf4")
ANSWER_BORDER = colors.HexColor("#22c55e")
ANSWER_TEXT = colors.HexColor("#14532d")
HEADER_LABEL_COLOR = colors.HexColor("#6b7280")
HEADER_PLACEHOLDER_COLOR = colors.HexColor("#9ca3af")
FOOTER_COLOR = colors.HexColor("#6b7280")
FOOTER_RULE_COLOR = colors.HexColor("#d1d5db")

# Header block proportions (of PageGeometry.header_height)
HEADER_TOP_ROW = 0.35
HEADER_ROW_GAP = 0.08
HEADER_BOTTOM_ROW = 0.49
HEADER_LEFT_CELL = 0.20
HEADER_COMMENTS_CELL = 0.80

BANNER_MAX_FONT_SIZE = 16
BANNER_MIN_FONT_SIZE = 8
LABEL_FONT_SIZE = 7
POINTS_FONT_SIZE = 10.5


def render_to_pdf(
    layout: LayoutResult,
    output_path: Path,
    *,
    document: Document,
    mode: RenderMode,
    geometry: Optional[PageGeometry] = None,
    typography: Optional[Typography] = None,
    category: Optional[Category] = None,
    formatter: Optional[ContentFormatter] = None,
    grade_scale: int = 20,
    show_footer: bool = True,
) -> None:
    """
    Render layout result to PDF file.

    Args:
        layout: Layout result from paginator
        output_path: Path to write PDF
        document: Document the layout was computed from (title, category)
        mode: Copy being rendered; must match the mode used for sizing
        geometry: Page geometry used for layout
        typography: Fonts used for measurement
        category: Resolved category for the title banner (default color if None)
        formatter: Content formatter shared with measurement
        grade_scale: Denominator printed in the grade cell
        show_footer: Draw title and page numbers on every page

    Raises:
        IOError: If PDF cannot be written

    Example:
        >>> render_to_pdf(layout, Path("out/quiz_student.pdf"), document=doc, mode=RenderMode.STUDENT)
    """
    geometry = geometry or PageGeometry()
    typography = typography or Typography()
    formatter = formatter or ContentFormatter(typography, image_dpi=geometry.dpi)

    if layout.page_count == 0:
        logger.warning("Empty layout, creating empty PDF")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    page_size = (geometry.px_to_pt(geometry.page_width), geometry.px_to_pt(geometry.page_height))
    c = canvas.Canvas(str(output_path), pagesize=page_size)
    c.setTitle(document.title)
    c.setSubject(f"{mode.value} copy")

    for page in layout.pages:
        _render_page(
            c, page, layout.page_count, document, category, mode,
            geometry, typography, formatter, grade_scale, show_footer,
        )
        c.showPage()

    c.save()

    logger.info(f"Rendered {layout.page_count} pages to {output_path}")


def _render_page(
    c: canvas.Canvas,
    page: Page,
    total_pages: int,
    document: Document,
    category: Optional[Category],
    mode: RenderMode,
    geometry: PageGeometry,
    typography: Typography,
    formatter: ContentFormatter,
    grade_scale: int,
    show_footer: bool,
) -> None:
    """Render a single page: header (page 1), items, footer."""
    top = geometry.padding

    if page.page_number == 1:
        _draw_header(c, document, category, geometry, typography, grade_scale)
        top += geometry.header_height

    for item in page.items:
        if isinstance(item, SectionItem):
            _draw_section(c, item, top, geometry, typography, formatter)
        elif isinstance(item, QuestionItem):
            _draw_question(c, item, top, mode, geometry, typography, formatter)
        top += item.height

    if show_footer:
        _draw_footer(c, document.title, page.page_number, total_pages, geometry, typography)


# ─────────────────────────────────────────────────────────────────────────────
# Header / footer
# ─────────────────────────────────────────────────────────────────────────────

def _draw_header(
    c: canvas.Canvas,
    document: Document,
    category: Optional[Category],
    geometry: PageGeometry,
    typography: Typography,
    grade_scale: int,
) -> None:
    """
    Draw the page-1 header block.

    Row 1: date cell | title banner in the category color.
    Row 2: comments cell | grade cell ("/ 20").
    """
    px = geometry.px_to_pt
    left = geometry.padding
    width = geometry.content_width
    top_row = geometry.header_height * HEADER_TOP_ROW
    bottom_row_top = geometry.padding + top_row + geometry.header_height * HEADER_ROW_GAP
    bottom_row = geometry.header_height * HEADER_BOTTOM_ROW

    date_width = width * HEADER_LEFT_CELL
    banner_width = width - date_width
    comments_width = width * HEADER_COMMENTS_CELL
    grade_width = width - comments_width

    color = category.color if category else DEFAULT_CATEGORY_COLOR
    text_color = colors.black if contrast_color(color) == "black" else colors.white

    c.saveState()
    c.setLineWidth(1)
    c.setStrokeColor(colors.black)

    # Date cell
    _cell(c, geometry, left, geometry.padding, date_width, top_row)
    _label(c, geometry, "DATE", left, geometry.padding, typography)
    c.setFont(typography.font_name, 10)
    c.setFillColor(HEADER_PLACEHOLDER_COLOR)
    c.drawCentredString(
        px(left + date_width / 2),
        _transform_y(geometry, geometry.padding + top_row / 2) - 4,
        "..../..../....",
    )

    # Title banner
    c.setFillColor(colors.HexColor(color))
    c.rect(
        px(left + date_width), _transform_y(geometry, geometry.padding + top_row),
        px(banner_width), px(top_row), stroke=1, fill=1,
    )
    title = document.title.upper()
    available = px(banner_width) - 16
    font_size = _fit_font_size(c, title, typography.bold_font_name, available)
    title = _truncate(c, title, typography.bold_font_name, font_size, available)
    c.setFont(typography.bold_font_name, font_size)
    c.setFillColor(text_color)
    c.drawCentredString(
        px(left + date_width + banner_width / 2),
        _transform_y(geometry, geometry.padding + top_row / 2) - font_size / 3,
        title,
    )

    # Comments / grade cells
    _cell(c, geometry, left, bottom_row_top, comments_width, bottom_row)
    _label(c, geometry, "COMMENTS", left, bottom_row_top, typography)
    _cell(c, geometry, left + comments_width, bottom_row_top, grade_width, bottom_row)
    _label(c, geometry, "GRADE", left + comments_width, bottom_row_top, typography)
    c.setFont(typography.bold_font_name, 20)
    c.setFillColor(colors.black)
    c.drawRightString(
        px(left + width) - 8,
        _transform_y(geometry, bottom_row_top + bottom_row) + 10,
        f"/ {grade_scale}",
    )

    c.restoreState()


def _draw_footer(
    c: canvas.Canvas,
    title: str,
    page_number: int,
    total_pages: int,
    geometry: PageGeometry,
    typography: Typography,
) -> None:
    """
    Draw the footer: document title left, "Page N / total" right.

    Positioned in the reserved footer band above the bottom padding.
    """
    px = geometry.px_to_pt
    top = geometry.page_height - geometry.padding - geometry.footer_height
    left = px(geometry.padding)
    right = px(geometry.padding + geometry.content_width)
    font = typography.bold_font_name
    size = typography.footer_font_size

    c.saveState()
    c.setStrokeColor(FOOTER_RULE_COLOR)
    c.setLineWidth(0.5)
    rule_y = _transform_y(geometry, top + 4)
    c.line(left, rule_y, right, rule_y)

    baseline = _transform_y(geometry, top + geometry.footer_height * 0.7)
    c.setFillColor(FOOTER_COLOR)
    c.setFont(font, size)
    page_label = f"Page {page_number} / {total_pages}"
    c.drawRightString(right, baseline, page_label)

    available = (right - left) * 0.75
    c.drawString(left, baseline, _truncate(c, title.upper(), font, size, available))
    c.restoreState()


def _cell(
    c: canvas.Canvas,
    geometry: PageGeometry,
    left: float,
    top: float,
    width: float,
    height: float,
) -> None:
    px = geometry.px_to_pt
    c.rect(px(left), _transform_y(geometry, top + height), px(width), px(height), stroke=1, fill=0)


def _label(
    c: canvas.Canvas,
    geometry: PageGeometry,
    text: str,
    left: float,
    top: float,
    typography: Typography,
) -> None:
    c.setFont(typography.bold_font_name, LABEL_FONT_SIZE)
    c.setFillColor(HEADER_LABEL_COLOR)
    c.drawString(geometry.px_to_pt(left) + 5, _transform_y(geometry, top) - 11, text)


def _fit_font_size(c: canvas.Canvas, text: str, font: str, available: float) -> float:
    size = BANNER_MAX_FONT_SIZE
    while size > BANNER_MIN_FONT_SIZE and c.stringWidth(text, font, size) > available:
        size -= 0.5
    return size


def _truncate(c: canvas.Canvas, text: str, font: str, size: float, available: float) -> str:
    if c.stringWidth(text, font, size) <= available:
        return text
    while text and c.stringWidth(text + "...", font, size) > available:
        text = text[:-1]
    return text.rstrip() + "..."


# ─────────────────────────────────────────────────────────────────────────────
# Items
# ─────────────────────────────────────────────────────────────────────────────

def _draw_section(
    c: canvas.Canvas,
    item: SectionItem,
    top: float,
    geometry: PageGeometry,
    typography: Typography,
    formatter: ContentFormatter,
) -> None:
    """Draw a section title with its points total over a red rule."""
    px = geometry.px_to_pt
    left = geometry.padding
    right = geometry.padding + geometry.content_width
    heading_height = item.height - geometry.section_rule_padding - geometry.item_spacing

    flowables = formatter.section_flowables(item.section_name, text_color=SECTION_COLOR)
    _draw_flowables(c, flowables, geometry, left, top, geometry.content_width - geometry.points_column)

    c.saveState()
    c.setFont(typography.bold_font_name, POINTS_FONT_SIZE)
    c.setFillColor(SECTION_COLOR)
    c.drawRightString(
        px(right),
        _transform_y(geometry, top + heading_height) + 3,
        f"({_format_points(item.points)} pts)",
    )

    rule_y = _transform_y(geometry, top + heading_height + geometry.section_rule_padding - 1)
    c.setStrokeColor(SECTION_COLOR)
    c.setLineWidth(px(2))
    c.line(px(left), rule_y, px(right), rule_y)
    c.restoreState()


def _draw_question(
    c: canvas.Canvas,
    item: QuestionItem,
    top: float,
    mode: RenderMode,
    geometry: PageGeometry,
    typography: Typography,
    formatter: ContentFormatter,
) -> None:
    """Draw question text, points and the answer region for the mode."""
    px = geometry.px_to_pt
    q = item.question
    left = geometry.padding + geometry.question_indent
    right = geometry.padding + geometry.content_width

    flowables = formatter.question_flowables(q.prompt_text, text_color=QUESTION_COLOR)
    _draw_flowables(c, flowables, geometry, left, top, geometry.question_text_width)

    if q.points > 0:
        c.saveState()
        c.setFont(typography.bold_font_name, typography.font_size * 0.85)
        c.setFillColor(POINTS_COLOR)
        c.drawRightString(
            px(right),
            _transform_y(geometry, top) - typography.font_size,
            f"/ {_format_points(q.points)}",
        )
        c.restoreState()

    region_top = top + item.text_height + geometry.prompt_gap
    region_left = left + geometry.answer_indent

    if mode is RenderMode.TEACHER:
        _draw_answer_box(c, item, region_left, region_top, geometry, formatter)
    elif q.has_student_prompt:
        flowables = _content_flowables(
            formatter, q.student_prompt, px(geometry.answer_width), None, q.id,
        )
        _draw_flowables(c, flowables, geometry, region_left, region_top, geometry.answer_width)
    else:
        _draw_ruled_lines(c, item.allocated_lines or 1, region_left, region_top, geometry)


def _draw_answer_box(
    c: canvas.Canvas,
    item: QuestionItem,
    left: float,
    top: float,
    geometry: PageGeometry,
    formatter: ContentFormatter,
) -> None:
    """Light-green box with a left border holding the model answer."""
    px = geometry.px_to_pt
    bottom = _transform_y(geometry, top + item.answer_height)

    c.saveState()
    c.setFillColor(ANSWER_FILL)
    c.rect(px(left), bottom, px(geometry.answer_width), px(item.answer_height), stroke=0, fill=1)
    c.setFillColor(ANSWER_BORDER)
    c.rect(px(left), bottom, px(geometry.answer_border), px(item.answer_height), stroke=0, fill=1)
    c.restoreState()

    flowables = _content_flowables(
        formatter, item.question.model_answer, px(geometry.answer_box_width),
        ANSWER_TEXT, item.question_id,
    )
    _draw_flowables(
        c, flowables, geometry,
        left + geometry.answer_border + geometry.answer_padding,
        top + geometry.answer_padding,
        geometry.answer_box_width,
    )


def _draw_ruled_lines(
    c: canvas.Canvas,
    lines: int,
    left: float,
    top: float,
    geometry: PageGeometry,
) -> None:
    """Draw ``lines`` writing lines, one per line_height band."""
    px = geometry.px_to_pt
    c.saveState()
    c.setStrokeColor(colors.black)
    c.setLineWidth(0.75)
    for index in range(1, lines + 1):
        y = _transform_y(geometry, top + index * geometry.line_height - 0.5)
        c.line(px(left), y, px(left + geometry.answer_width), y)
    c.restoreState()


def _content_flowables(
    formatter: ContentFormatter,
    block: str,
    width_pt: float,
    text_color: Optional[colors.Color],
    question_id: str,
) -> List[Flowable]:
    """Formatted flowables, or plain text when the markup cannot be used."""
    try:
        return formatter.to_flowables(block, width_pt, text_color=text_color)
    except Exception as e:
        logger.warning(f"Question {question_id}: rendering content as plain text ({e})")
        return formatter.plain_flowables(block, text_color=text_color)


def _draw_flowables(
    c: canvas.Canvas,
    flowables: List[Flowable],
    geometry: PageGeometry,
    left: float,
    top: float,
    width: float,
) -> None:
    """Stack flowables downward from (left, top), both in layout units."""
    width_pt = geometry.px_to_pt(width)
    x_pt = geometry.px_to_pt(left)
    y_pt = _transform_y(geometry, top)

    for index, flowable in enumerate(flowables):
        _, height = flowable.wrap(width_pt, WRAP_HEIGHT)
        if index > 0:
            y_pt -= flowable.getSpaceBefore()
        y_pt -= height
        flowable.drawOn(c, x_pt, y_pt)
        y_pt -= flowable.getSpaceAfter()


def _transform_y(geometry: PageGeometry, top_px: float) -> float:
    """
    Convert a top-down layout coordinate to a bottom-up PDF coordinate.

    Args:
        geometry: Page geometry (height and DPI)
        top_px: Distance from the top of the page in layout units

    Returns:
        Y position in points from the bottom of the page
    """
    return geometry.px_to_pt(geometry.page_height - top_px)


def _format_points(points: float) -> str:
    return f"{points:g}"
