"""
Unit tests for the answer-space sizer.
"""

import pytest

from evaluation_toolkit.builder.layout import (
    BlockHeights,
    MeasurementTable,
    PageGeometry,
    QuestionItem,
    RenderMode,
    SectionItem,
    allocate_lines,
    size_items,
)


class TestAllocateLines:
    """Line count is derived from the model answer, never a constant."""

    @pytest.mark.parametrize("height,expected", [
        (0, 1),
        (20, 2),     # ceil(20/30) + 1
        (30, 2),
        (31, 3),
        (60, 3),
        (340, 13),
    ])
    def test_formula(self, height, expected):
        assert allocate_lines(height, 30) == expected

    def test_always_at_least_one_line(self):
        assert allocate_lines(-5, 30) >= 1

    def test_monotonic_in_answer_height(self):
        counts = [allocate_lines(h, 30) for h in range(0, 500, 7)]

        assert counts == sorted(counts)

    def test_when_line_height_not_positive_then_raises(self):
        with pytest.raises(ValueError):
            allocate_lines(10, 0)


class TestSizeItems:

    @pytest.fixture
    def geometry(self):
        return PageGeometry()

    def _table(self, **questions):
        return MeasurementTable(
            questions=questions,
            sections={"Ex.1": 25},
        )

    def test_when_section_then_heading_plus_rule_and_margin(self, geometry):
        table = self._table()

        (sized,) = size_items([SectionItem("Ex.1", 4)], table, geometry, RenderMode.STUDENT)

        assert sized.height == 25 + geometry.section_rule_padding + geometry.item_spacing

    def test_when_student_without_prompt_then_ruled_lines(self, geometry, question_factory):
        # Arrange
        q = question_factory("q1", answer="<p>long</p>")
        table = self._table(q1=BlockHeights(question_text=18, model_answer=340))

        # Act
        (sized,) = size_items([QuestionItem(q)], table, geometry, RenderMode.STUDENT)

        # Assert
        assert sized.allocated_lines == 13
        assert sized.answer_height == 13 * 30
        assert sized.height == 18 + geometry.prompt_gap + 390 + geometry.item_spacing

    def test_when_student_with_prompt_then_prompt_height_and_no_lines(
        self, geometry, question_factory
    ):
        q = question_factory("q1", answer="<p>x</p>", prompt="<p>Fill: ___</p>")
        table = self._table(q1=BlockHeights(question_text=18, model_answer=340, student_prompt=40))

        (sized,) = size_items([QuestionItem(q)], table, geometry, RenderMode.STUDENT)

        assert sized.allocated_lines is None
        assert sized.answer_height == 40

    def test_when_student_with_empty_prompt_then_no_lines(self, geometry, question_factory):
        q = question_factory("q1", answer="<p>x</p>", prompt="")
        table = self._table(q1=BlockHeights(question_text=18, model_answer=60, student_prompt=0))

        (sized,) = size_items([QuestionItem(q)], table, geometry, RenderMode.STUDENT)

        assert sized.allocated_lines is None
        assert sized.answer_height == 0

    def test_when_teacher_then_answer_plus_box_padding(self, geometry, question_factory):
        q = question_factory("q1", answer="<p>x</p>")
        table = self._table(q1=BlockHeights(question_text=18, model_answer=60))

        (sized,) = size_items([QuestionItem(q)], table, geometry, RenderMode.TEACHER)

        assert sized.allocated_lines is None
        assert sized.answer_height == 60 + 2 * geometry.answer_padding
        assert sized.text_height == 18

    def test_when_not_measured_then_key_error(self, geometry, question_factory):
        with pytest.raises(KeyError, match="was not measured"):
            size_items([QuestionItem(question_factory("q9"))], self._table(),
                       geometry, RenderMode.TEACHER)

    def test_input_items_unchanged(self, geometry, question_factory):
        item = QuestionItem(question_factory("q1"))
        table = self._table(q1=BlockHeights(question_text=18, model_answer=60))

        size_items([item], table, geometry, RenderMode.STUDENT)

        assert item.height == 0
