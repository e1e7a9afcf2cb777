"""
Unit tests for layout data models.
"""

import pytest

from evaluation_toolkit.builder.layout import (
    BlockHeights,
    LayoutResult,
    MeasurementTable,
    Page,
    QuestionItem,
    SectionItem,
)


class TestPage:

    def test_overflowing_only_when_over_budget(self, question_factory):
        item = QuestionItem(question_factory("q1"), height=500)

        assert not Page(1, (item,), height_used=500, max_height=500).overflowing
        assert Page(1, (item,), height_used=501, max_height=500).overflowing

    def test_question_ids_skip_sections(self, question_factory):
        page = Page(1, (
            SectionItem("Ex.1", 2, height=40),
            QuestionItem(question_factory("q1"), height=100),
        ))

        assert page.question_ids == ["q1"]
        assert page.item_count == 2
        assert not page.is_empty


class TestLayoutResult:

    def test_empty(self):
        result = LayoutResult(pages=())

        assert result.page_count == 0
        assert result.overflow_pages == []
        assert result.items == []

    def test_items_flattened_in_page_order(self, question_factory):
        a = QuestionItem(question_factory("a"), height=10)
        b = QuestionItem(question_factory("b"), height=10)
        result = LayoutResult(pages=(Page(1, (a,)), Page(2, (b,))))

        assert result.items == [a, b]
        assert result.total_items == 2


class TestMeasurementTable:

    def test_lookup_when_missing_then_key_error(self):
        table = MeasurementTable(questions={"q1": BlockHeights(10, 20)})

        assert table.for_question("q1").model_answer == 20
        with pytest.raises(KeyError, match="was not measured"):
            table.for_question("q2")
        with pytest.raises(KeyError, match="was not measured"):
            table.for_section("Ex.1")

    def test_items_are_immutable(self, question_factory):
        item = QuestionItem(question_factory("q1"))

        with pytest.raises(AttributeError):
            item.height = 10
