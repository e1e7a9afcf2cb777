"""
Module: builder.layout.config

Purpose:
    Configuration for the page layout engine.
    Defines page geometry, typography and the rendering mode.

Key Classes:
    - PageGeometry: Immutable page dimensions and reserved regions
    - Typography: Immutable font settings shared by measurement and rendering
    - RenderMode: Teacher copy or student copy

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - builder.layout.measure: Block widths and fonts
    - builder.layout.sizer: Line height and margins
    - builder.layout.paginator: Per-page content budgets
    - builder.output.renderer: Drawing positions
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# A4 at 96 DPI (CSS pixels)
DEFAULT_PAGE_WIDTH_PX = 794
DEFAULT_PAGE_HEIGHT_PX = 1123
DEFAULT_DPI = 96


class RenderMode(Enum):
    """
    Which copy of the evaluation to lay out.

    Attributes:
        TEACHER: Model answers are shown
        STUDENT: Student prompts or ruled answer lines are shown

    Example:
        >>> RenderMode.parse("Student")
        <RenderMode.STUDENT: 'student'>
    """

    TEACHER = "teacher"
    STUDENT = "student"

    @classmethod
    def parse(cls, value: "str | RenderMode") -> "RenderMode":
        if isinstance(value, RenderMode):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"mode must be 'teacher' or 'student': {value!r}"
            ) from None


@dataclass(frozen=True)
class PageGeometry:
    """
    Page geometry for layout (immutable).

    All lengths are layout units: CSS pixels at ``dpi`` (96 by default).
    Every content budget is derived from these values, never hard-coded.

    Attributes:
        page_width: Physical page width
        page_height: Physical page height
        padding: Page padding on every side
        header_height: Header block reserved on page 1 only
        footer_height: Footer reserved on every page
        safety_buffer: Subtracted from every budget to absorb rounding
        line_height: Height of one ruled answer line
        item_spacing: Bottom margin after every section/question item
        prompt_gap: Gap between question text and its answer region
        question_indent: Left indent of question items
        answer_indent: Additional left indent of the answer region
        answer_padding: Inner padding of the teacher answer box
        answer_border: Left border width of the teacher answer box
        points_column: Width reserved right of the question text for "/ N"
        section_rule_padding: Space between section title and its rule
        dpi: Pixels per inch, for conversion to PDF points

    Example:
        >>> geometry = PageGeometry()
        >>> geometry.content_height(1)
        809  # 1123 - 2*38 - 28 - 5 - 205
        >>> geometry.content_height(2)
        1014
    """

    # Page dimensions
    page_width: int = DEFAULT_PAGE_WIDTH_PX
    page_height: int = DEFAULT_PAGE_HEIGHT_PX
    padding: int = 38

    # Reserved regions
    header_height: int = 205
    footer_height: int = 28
    safety_buffer: int = 5

    # Answer areas
    line_height: int = 30

    # Item spacing
    item_spacing: int = 12
    prompt_gap: int = 8
    question_indent: int = 8
    answer_indent: int = 8
    answer_padding: int = 12
    answer_border: int = 4
    points_column: int = 48
    section_rule_padding: int = 6

    dpi: int = DEFAULT_DPI

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.line_height <= 0:
            raise ValueError(f"line_height must be positive: {self.line_height}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")
        for name in ("padding", "header_height", "footer_height", "safety_buffer",
                     "item_spacing", "prompt_gap", "question_indent", "answer_indent",
                     "answer_padding", "answer_border", "points_column",
                     "section_rule_padding"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative: {getattr(self, name)}")
        if self.answer_box_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.content_height(1) <= 0:
            raise ValueError("Reserved regions exceed page height")

    @property
    def content_width(self) -> int:
        """Width available for content (excluding padding)."""
        return self.page_width - 2 * self.padding

    def content_height(self, page_number: int) -> int:
        """
        Height available for items on a page.

        Page 1 additionally reserves the header block.

        Args:
            page_number: 1-indexed page number
        """
        if page_number < 1:
            raise ValueError(f"page_number must be >= 1: {page_number}")
        height = (
            self.page_height
            - 2 * self.padding
            - self.footer_height
            - self.safety_buffer
        )
        if page_number == 1:
            height -= self.header_height
        return height

    @property
    def question_text_width(self) -> int:
        """Width of the bold question text (points column excluded)."""
        return self.content_width - self.question_indent - self.points_column

    @property
    def answer_width(self) -> int:
        """Width of a student answer region (prompt or ruled lines)."""
        return self.content_width - self.question_indent - self.answer_indent

    @property
    def answer_box_width(self) -> int:
        """Content width inside the teacher answer box."""
        return self.answer_width - 2 * self.answer_padding - self.answer_border

    def px_to_pt(self, px: float) -> float:
        """Convert layout units to PDF points (1/72 inch)."""
        return px * 72.0 / self.dpi

    def pt_to_px(self, pt: float) -> float:
        """Convert PDF points to layout units."""
        return pt * self.dpi / 72.0


@dataclass(frozen=True)
class Typography:
    """
    Font settings (immutable).

    The measurement pass and the renderer must share one Typography
    instance, otherwise measured heights do not match the printed page.

    Attributes:
        font_name: Body font
        bold_font_name: Bold body font (question text)
        italic_font_name: Italic body font
        bold_italic_font_name: Bold italic body font
        font_size: Body size in points
        leading_ratio: Line height as a multiple of font size
        section_font_size: Section heading size in points
        footer_font_size: Footer size in points
    """

    font_name: str = "Helvetica"
    bold_font_name: str = "Helvetica-Bold"
    italic_font_name: str = "Helvetica-Oblique"
    bold_italic_font_name: str = "Helvetica-BoldOblique"
    font_size: float = 13.0
    leading_ratio: float = 1.4
    section_font_size: float = 13.5
    footer_font_size: float = 7.0

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive: {self.font_size}")
        if self.leading_ratio < 1.0:
            raise ValueError(f"leading_ratio must be >= 1: {self.leading_ratio}")
        if self.section_font_size <= 0:
            raise ValueError(f"section_font_size must be positive: {self.section_font_size}")

    @property
    def leading(self) -> float:
        """Body line height in points."""
        return self.font_size * self.leading_ratio

    @property
    def section_leading(self) -> float:
        return self.section_font_size * self.leading_ratio
