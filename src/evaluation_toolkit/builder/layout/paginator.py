"""
Module: builder.layout.paginator

Purpose:
    Assign sized items to pages using greedy space-based placement.
    Only rule beyond "fill until full": a section header stays with the
    question that follows it.

Key Functions:
    - paginate(): Main pagination function

Algorithm:
    1. Group each section header with its first question ("atomic group")
    2. Place the group on the current page if it fits the page budget
    3. Otherwise close the page and place the group on a fresh one
    4. A group taller than an empty page is placed alone and the page is
       flagged as overflowing; pagination never splits an item

Dependencies:
    - builder.layout.models: FlatItem, Page, LayoutResult
    - builder.layout.config: PageGeometry

Used By:
    - builder.controller: Main build controller
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from .config import PageGeometry
from .models import FlatItem, LayoutResult, Page, QuestionItem, SectionItem

logger = logging.getLogger(__name__)


def paginate(
    items: Sequence[FlatItem],
    geometry: PageGeometry,
) -> LayoutResult:
    """
    Arrange sized items onto pages.

    Page 1 has a smaller budget than later pages because the header block
    is reserved on it (see PageGeometry.content_height).

    Guarantees:
        - Every item appears on exactly one page, in input order
        - No page ends with a section header whose question is on a later page
        - A page's items fit its budget unless a single group is larger than
          the budget, in which case that group is alone on the page
        - The same input always gives the same pages

    Args:
        items: Sized items from the sizer
        geometry: Page geometry

    Returns:
        LayoutResult with pages, warnings and the question -> pages map
    """
    if not items:
        logger.info("No items to paginate")
        return LayoutResult(pages=())

    pages: List[Page] = []
    warnings: List[str] = []
    question_page_map: dict[str, list[int]] = {}

    page_number = 1
    max_height = geometry.content_height(page_number)
    current_items: List[FlatItem] = []
    current_height = 0.0

    i = 0
    while i < len(items):
        group = _get_atomic_group(i, items)
        group_height = sum(item.height for item in group)

        if current_items and current_height + group_height > max_height:
            # Group doesn't fit - start new page
            pages.append(Page(
                page_number=page_number,
                items=tuple(current_items),
                height_used=current_height,
                max_height=max_height,
            ))
            page_number += 1
            max_height = geometry.content_height(page_number)
            current_items = []
            current_height = 0.0

        if not current_items and group_height > max_height:
            message = (
                f"Page {page_number} overflows: {_describe(group)} needs "
                f"{group_height:.0f} units, {max_height} available"
            )
            logger.warning(message)
            warnings.append(message)

        current_items.extend(group)
        current_height += group_height

        for item in group:
            if isinstance(item, QuestionItem):
                _track_question(question_page_map, item.question_id, page_number)

        i += len(group)

    # Add final page
    pages.append(Page(
        page_number=page_number,
        items=tuple(current_items),
        height_used=current_height,
        max_height=max_height,
    ))

    logger.info(f"Paginated {len(items)} items onto {len(pages)} pages")

    return LayoutResult(
        pages=tuple(pages),
        warnings=tuple(warnings),
        question_page_map=question_page_map,
    )


def _get_atomic_group(start_idx: int, items: Sequence[FlatItem]) -> List[FlatItem]:
    """
    Get the next atomic group of items starting at start_idx.

    A section header grabs the question right after it; everything else
    stands alone.

    Args:
        start_idx: Current index in items
        items: Full item sequence

    Returns:
        List of items that must stay together
    """
    group = [items[start_idx]]
    if (
        isinstance(items[start_idx], SectionItem)
        and start_idx + 1 < len(items)
        and isinstance(items[start_idx + 1], QuestionItem)
    ):
        group.append(items[start_idx + 1])
    return group


def _track_question(
    question_page_map: dict[str, list[int]],
    question_id: str,
    page_number: int,
) -> None:
    """Track which pages a question appears on."""
    if question_id not in question_page_map:
        question_page_map[question_id] = []
    if page_number not in question_page_map[question_id]:
        question_page_map[question_id].append(page_number)


def _describe(group: Sequence[FlatItem]) -> str:
    labels = []
    for item in group:
        if isinstance(item, SectionItem):
            labels.append(f"section {item.section_name!r}")
        else:
            labels.append(f"question {item.question_id}")
    return " + ".join(labels)
