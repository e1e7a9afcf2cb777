"""
Module: builder.layout.sizer

Purpose:
    Turn measured block heights into final item heights for one mode.
    In student mode this is where blank answer space is derived from the
    model answer: the student always gets at least one ruled line more than
    the teacher's own answer occupies.

Key Functions:
    - allocate_lines(): Ruled line count for a measured model answer
    - size_items(): Items with heights (and line counts) filled in

Height model (layout units):
    section  = heading + section_rule_padding + item_spacing
    question = text + prompt_gap + answer region + item_spacing

    answer region:
        teacher                  -> model answer + 2 * answer_padding
        student, prompt given    -> student prompt
        student, no prompt       -> allocated_lines * line_height

Dependencies:
    - builder.layout.models: FlatItem, MeasurementTable
    - builder.layout.config: PageGeometry, RenderMode

Used By:
    - builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Sequence

from .config import PageGeometry, RenderMode
from .models import FlatItem, MeasurementTable, QuestionItem, SectionItem

logger = logging.getLogger(__name__)


def allocate_lines(answer_height: float, line_height: float) -> int:
    """
    Number of ruled lines for a student answer area.

    Args:
        answer_height: Measured model answer height
        line_height: Height of one ruled line

    Returns:
        max(1, ceil(answer_height / line_height) + 1)

    Example:
        >>> allocate_lines(340, 30)
        13
        >>> allocate_lines(0, 30)
        1
    """
    if line_height <= 0:
        raise ValueError(f"line_height must be positive: {line_height}")
    if answer_height <= 0:
        return 1
    return max(1, math.ceil(answer_height / line_height) + 1)


def size_items(
    items: Sequence[FlatItem],
    table: MeasurementTable,
    geometry: PageGeometry,
    mode: RenderMode,
) -> List[FlatItem]:
    """
    Fill in item heights for the given mode.

    Args:
        items: Flattened items (heights unset)
        table: Measurement pass output
        geometry: Page geometry
        mode: Teacher or student copy

    Returns:
        New list of sized items, same order

    Raises:
        KeyError: If an item was not measured
    """
    sized: List[FlatItem] = []

    for item in items:
        if isinstance(item, SectionItem):
            height = (
                table.for_section(item.section_name)
                + geometry.section_rule_padding
                + geometry.item_spacing
            )
            sized.append(replace(item, height=height))
        else:
            sized.append(_size_question(item, table, geometry, mode))

    return sized


def _size_question(
    item: QuestionItem,
    table: MeasurementTable,
    geometry: PageGeometry,
    mode: RenderMode,
) -> QuestionItem:
    q = item.question
    heights = table.for_question(q.id)
    lines = None

    if mode is RenderMode.TEACHER:
        answer_height = heights.model_answer + 2 * geometry.answer_padding
    elif q.has_student_prompt:
        answer_height = heights.student_prompt or 0.0
    else:
        lines = allocate_lines(heights.model_answer, geometry.line_height)
        answer_height = lines * geometry.line_height
        logger.debug(
            f"Question {q.id}: answer {heights.model_answer:.1f} units -> {lines} lines"
        )

    height = (
        heights.question_text
        + geometry.prompt_gap
        + answer_height
        + geometry.item_spacing
    )
    return replace(
        item,
        height=height,
        text_height=heights.question_text,
        answer_height=answer_height,
        allocated_lines=lines,
    )
