"""
Module: builder.layout.flattener

Purpose:
    Convert the section/question tree of a Document into the ordered flat
    item sequence the paginator walks.

Key Functions:
    - flatten(): Document -> [SectionItem, QuestionItem, ...]

Algorithm:
    1. Collect distinct section names in order of first appearance
       (blank names resolve to "Other")
    2. For each section: emit one SectionItem carrying the summed points,
       then every member question in stored order

Dependencies:
    - core.models: Document
    - builder.layout.models: SectionItem, QuestionItem

Used By:
    - builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import logging
from typing import List

from evaluation_toolkit.core.models import Document

from .models import FlatItem, QuestionItem, SectionItem

logger = logging.getLogger(__name__)


def flatten(document: Document) -> List[FlatItem]:
    """
    Flatten a document into section-header and question items.

    Heights are left unset; the measurement pass and sizer fill them.
    Sections without questions cannot exist here: a section is derived from
    its questions.

    Args:
        document: Document to flatten

    Returns:
        Fresh list of items, grouped by section

    Example:
        >>> [item.kind for item in flatten(doc)]
        ['section', 'question', 'question', 'section', 'question']
    """
    items: List[FlatItem] = []

    for section in document.sections:
        items.append(SectionItem(section_name=section.name, points=section.points))
        items.extend(QuestionItem(question=q) for q in section.questions)

    logger.debug(
        f"Flattened {document.question_count} questions into "
        f"{len(document.sections)} sections ({len(items)} items)"
    )
    return items
