"""
Module: builder.layout.models

Purpose:
    Data models for page layout.
    Immutable dataclasses representing flattened items, measured block
    heights, pages and the final layout.

Key Classes:
    - SectionItem: Section header in the flat item sequence
    - QuestionItem: Question in the flat item sequence
    - BlockHeights / MeasurementTable: Side-table produced by the measurement pass
    - Page: Items assigned to one physical page
    - LayoutResult: Final layout output with diagnostics

Dependencies:
    - dataclasses (std)
    - core.models: Question

Used By:
    - builder.layout.flattener: Creates items
    - builder.layout.measure: Creates MeasurementTable
    - builder.layout.sizer: Fills heights and line counts
    - builder.layout.paginator: Creates Pages
    - builder.output.renderer: Draws Pages
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from evaluation_toolkit.core.models import Question


@dataclass(frozen=True)
class SectionItem:
    """
    Section header item (immutable).

    Attributes:
        section_name: Resolved section name
        points: Sum of the section's question points
        height: Full height contribution including bottom margin
            (0 until sized)
    """

    section_name: str
    points: float
    height: float = 0

    @property
    def kind(self) -> str:
        return "section"


@dataclass(frozen=True)
class QuestionItem:
    """
    Question item (immutable).

    Attributes:
        question: The source Question
        height: Full height contribution including bottom margin
            (0 until sized)
        text_height: Height of the question text line(s)
        answer_height: Height of the answer region for the current mode
        allocated_lines: Ruled lines for the student copy; None when the
            question shows content instead of lines
    """

    question: Question
    height: float = 0
    text_height: float = 0
    answer_height: float = 0
    allocated_lines: Optional[int] = None

    @property
    def kind(self) -> str:
        return "question"

    @property
    def question_id(self) -> str:
        return self.question.id


FlatItem = Union[SectionItem, QuestionItem]


@dataclass(frozen=True)
class BlockHeights:
    """
    Measured heights of one question's blocks, in layout units.

    Attributes:
        question_text: Bold question text at the question text width
        model_answer: Model answer at the teacher answer box width
        student_prompt: Student prompt at the answer width, None when the
            question has no prompt
    """

    question_text: float
    model_answer: float
    student_prompt: Optional[float] = None


@dataclass(frozen=True)
class MeasurementTable:
    """
    Output of the measurement pass (immutable).

    Consumed by the sizer; layout never reads a height that is not in here.

    Attributes:
        questions: question_id -> BlockHeights
        sections: section name -> heading height
        failures: Descriptions of blocks that fell back to one line
    """

    questions: dict[str, BlockHeights] = field(default_factory=dict)
    sections: dict[str, float] = field(default_factory=dict)
    failures: tuple[str, ...] = ()

    def for_question(self, question_id: str) -> BlockHeights:
        try:
            return self.questions[question_id]
        except KeyError:
            raise KeyError(f"Question {question_id!r} was not measured") from None

    def for_section(self, section_name: str) -> float:
        try:
            return self.sections[section_name]
        except KeyError:
            raise KeyError(f"Section {section_name!r} was not measured") from None


@dataclass(frozen=True)
class Page:
    """
    Items assigned to one page (immutable).

    Attributes:
        page_number: 1-indexed page number
        items: Items in print order
        height_used: Sum of item heights
        max_height: Content budget for this page

    Example:
        >>> page = Page(page_number=1, items=(header, q1), height_used=300, max_height=809)
        >>> page.overflowing
        False
    """

    page_number: int
    items: tuple[FlatItem, ...]
    height_used: float = 0
    max_height: float = 0

    @property
    def overflowing(self) -> bool:
        """Content exceeds the page budget (oversized item placed alone)."""
        return self.height_used > self.max_height

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def question_ids(self) -> list[str]:
        return [item.question.id for item in self.items if isinstance(item, QuestionItem)]


@dataclass(frozen=True)
class LayoutResult:
    """
    Final layout output with diagnostics.

    Attributes:
        pages: Tuple of Pages
        warnings: Human-readable warnings (overflowing pages, measurement fallbacks)
        question_page_map: question_id -> page numbers it appears on

    Example:
        >>> result = LayoutResult(pages=(page1, page2))
        >>> result.page_count
        2
    """

    pages: tuple[Page, ...]
    warnings: tuple[str, ...] = ()
    question_page_map: dict[str, list[int]] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def overflow_pages(self) -> list[int]:
        """Page numbers flagged as overflowing."""
        return [p.page_number for p in self.pages if p.overflowing]

    @property
    def items(self) -> list[FlatItem]:
        """All items in print order."""
        return [item for page in self.pages for item in page.items]

    @property
    def total_items(self) -> int:
        return sum(p.item_count for p in self.pages)
