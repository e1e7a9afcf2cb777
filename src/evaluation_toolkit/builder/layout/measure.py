"""
Module: builder.layout.measure

Purpose:
    Measurement pass. Lays every block out at full fidelity, reads its
    height back and records it in a MeasurementTable that the sizer and
    paginator consume. Measurement never fails the build: a block that
    cannot be laid out falls back to one line height and is reported.

Key Classes:
    - BlockKind: What a block is (formatted content, question text, heading)
    - MeasurementOracle: Abstract block -> height interface
    - ReportLabOracle: Oracle backed by ReportLab paragraph wrapping

Key Functions:
    - measure_items(): Build the MeasurementTable for flattened items

Dependencies:
    - reportlab (via builder.layout.content): Text wrapping
    - builder.layout.config: PageGeometry, Typography

Used By:
    - builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import PageGeometry, Typography
from .content import ContentFormatter, stack_height
from .models import BlockHeights, FlatItem, MeasurementTable, QuestionItem, SectionItem

logger = logging.getLogger(__name__)


class BlockKind(Enum):
    """How a block is typeset."""

    CONTENT = "content"
    QUESTION_TEXT = "question_text"
    SECTION_HEADING = "section_heading"


class MeasurementOracle(ABC):
    """
    Abstract interface for measuring rendered block heights.

    Implementations lay a block out at a width constraint and report its
    height in layout units. The same oracle must be used for every block of
    one layout run.
    """

    def __init__(self, fallback_height: float):
        self.fallback_height = fallback_height

    @abstractmethod
    def _measure(self, block: str, width: float, kind: BlockKind) -> float:
        """
        Measure one block; may raise on malformed content.

        Args:
            block: Block content (HTML for CONTENT, plain text otherwise)
            width: Width constraint in layout units
            kind: How the block is typeset

        Returns:
            Height in layout units
        """

    def measure_checked(
        self,
        block: str,
        width: float,
        kind: BlockKind = BlockKind.CONTENT,
    ) -> Tuple[float, Optional[str]]:
        """
        Measure a block, substituting the fallback height on failure.

        Returns:
            (height, error) where error is None on success
        """
        try:
            height = self._measure(block, width, kind)
        except Exception as e:
            logger.warning(
                f"Cannot measure {kind.value} block ({_preview(block)}): {e}; "
                f"using {self.fallback_height} units"
            )
            return self.fallback_height, str(e)

        if height < 0:
            return self.fallback_height, f"negative height {height}"
        return height, None

    def measure(
        self,
        block: str,
        width: float,
        kind: BlockKind = BlockKind.CONTENT,
    ) -> float:
        """Measure a block; never raises."""
        return self.measure_checked(block, width, kind)[0]


class ReportLabOracle(MeasurementOracle):
    """
    Measures blocks by wrapping ReportLab flowables.

    Shares its ContentFormatter with the renderer so heights match the
    printed page.

    Example:
        >>> oracle = ReportLabOracle(PageGeometry(), Typography())
        >>> oracle.measure("<p>One line</p>", 600)
        24.27
    """

    def __init__(
        self,
        geometry: PageGeometry,
        typography: Typography,
        assets_dir: Optional[Path] = None,
        formatter: Optional[ContentFormatter] = None,
    ):
        super().__init__(fallback_height=geometry.line_height)
        self.geometry = geometry
        self.typography = typography
        self.formatter = formatter or ContentFormatter(
            typography, assets_dir=assets_dir, image_dpi=geometry.dpi
        )

    def _measure(self, block: str, width: float, kind: BlockKind) -> float:
        width_pt = self.geometry.px_to_pt(width)

        if kind is BlockKind.QUESTION_TEXT:
            flowables = self.formatter.question_flowables(block)
        elif kind is BlockKind.SECTION_HEADING:
            flowables = self.formatter.section_flowables(block)
        else:
            flowables = self.formatter.to_flowables(block, width_pt)

        if not flowables:
            return 0.0
        return round(self.geometry.pt_to_px(stack_height(flowables, width_pt)), 2)


def measure_items(
    items: Sequence[FlatItem],
    oracle: MeasurementOracle,
    geometry: PageGeometry,
) -> MeasurementTable:
    """
    Measure every block of every item.

    All blocks are measured regardless of mode, so one table serves both
    the teacher and the student copy.

    Widths:
        - question text: geometry.question_text_width
        - model answer: geometry.answer_box_width (inside the teacher box)
        - student prompt: geometry.answer_width
        - section heading: content width minus the points label column

    Args:
        items: Flattened items
        oracle: Measurement oracle
        geometry: Page geometry

    Returns:
        MeasurementTable with one entry per question and section
    """
    questions = {}
    sections = {}
    failures: List[str] = []

    def measure(block: str, width: float, kind: BlockKind, label: str) -> float:
        height, error = oracle.measure_checked(block, width, kind)
        if error is not None:
            failures.append(f"{label}: measurement failed ({error}), using one line")
        return height

    for item in items:
        if isinstance(item, SectionItem):
            sections[item.section_name] = measure(
                item.section_name,
                geometry.content_width - geometry.points_column,
                BlockKind.SECTION_HEADING,
                f"Section {item.section_name!r}",
            )
        elif isinstance(item, QuestionItem):
            q = item.question
            prompt_height = None
            if q.has_student_prompt:
                prompt_height = measure(
                    q.student_prompt, geometry.answer_width, BlockKind.CONTENT,
                    f"Question {q.id} student prompt",
                )
            questions[q.id] = BlockHeights(
                question_text=measure(
                    q.prompt_text, geometry.question_text_width,
                    BlockKind.QUESTION_TEXT, f"Question {q.id} text",
                ),
                model_answer=measure(
                    q.model_answer, geometry.answer_box_width,
                    BlockKind.CONTENT, f"Question {q.id} model answer",
                ),
                student_prompt=prompt_height,
            )

    logger.debug(
        f"Measured {len(questions)} questions and {len(sections)} sections "
        f"({len(failures)} fallbacks)"
    )
    return MeasurementTable(
        questions=questions,
        sections=sections,
        failures=tuple(failures),
    )


def _preview(block: str, limit: int = 40) -> str:
    text = " ".join((block or "").split())
    return text if len(text) <= limit else text[:limit] + "..."
