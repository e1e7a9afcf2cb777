"""
Tests for the build controller: pure pagination and full builds.

Verifies the worked example for student line allocation and the
metadata written next to each PDF.
"""

import json

import pytest

from evaluation_toolkit.builder import (
    BuildError,
    BuilderConfig,
    PageGeometry,
    RenderMode,
    build_document,
    paginate_document,
)
from evaluation_toolkit.builder.controller import (
    METADATA_FILENAME,
    _build_metadata,
    slugify,
)
from evaluation_toolkit.builder.layout import QuestionItem, SectionItem
from evaluation_toolkit.core.models import Document


@pytest.fixture
def three_question_document(question_factory) -> Document:
    """One section, model answers measuring 20, 340 and 60 units."""
    return Document(id="ex1", title="Exercise 1", questions=(
        question_factory("q1", "Ex.1", answer="A20"),
        question_factory("q2", "Ex.1", answer="A340"),
        question_factory("q3", "Ex.1", answer="A60"),
    ))


@pytest.fixture
def example_oracle(make_oracle):
    return make_oracle(heights={"A20": 20, "A340": 340, "A60": 60}, default=20, heading=25)


class TestPaginateDocument:

    def test_student_lines_follow_model_answer(self, three_question_document, example_oracle):
        # Act
        layout = paginate_document(
            three_question_document, RenderMode.STUDENT, oracle=example_oracle,
        )

        # Assert
        lines = [i.allocated_lines for i in layout.items if isinstance(i, QuestionItem)]
        assert lines == [2, 13, 3]

    def test_when_budget_fits_header_and_two_questions_then_two_pages(
        self, three_question_document, example_oracle
    ):
        # Arrange: section 43, q1 100, q2 430, q3 130; page 1 budget 614
        geometry = PageGeometry(header_height=400)

        # Act
        layout = paginate_document(
            three_question_document, RenderMode.STUDENT,
            geometry=geometry, oracle=example_oracle,
        )

        # Assert
        assert layout.page_count == 2
        first = layout.pages[0].items
        assert isinstance(first[0], SectionItem)
        assert [i.question_id for i in first[1:]] == ["q1", "q2"]
        assert [i.question_id for i in layout.pages[1].items] == ["q3"]
        headers = [i for i in layout.items if isinstance(i, SectionItem)]
        assert len(headers) == 1

    def test_teacher_copy_has_no_lines(self, three_question_document, example_oracle):
        layout = paginate_document(
            three_question_document, RenderMode.TEACHER, oracle=example_oracle,
        )

        assert all(
            i.allocated_lines is None for i in layout.items if isinstance(i, QuestionItem)
        )

    def test_when_empty_document_then_zero_pages(self, fake_oracle):
        layout = paginate_document(
            Document(id="d", title="Empty"), RenderMode.STUDENT, oracle=fake_oracle,
        )

        assert layout.page_count == 0

    def test_measurement_failures_become_warnings(self, make_oracle, question_factory):
        oracle = make_oracle(failing=("BROKEN",))
        doc = Document(id="d", title="T", questions=(question_factory("q1", answer="BROKEN"),))

        layout = paginate_document(doc, RenderMode.STUDENT, oracle=oracle)

        assert any("measurement failed" in w for w in layout.warnings)
        # Fallback of one line (30) -> ceil(30/30) + 1
        assert layout.items[1].allocated_lines == 2

    def test_repeatable_and_document_untouched(self, sample_document, make_oracle):
        before = sample_document.to_dict()

        first = paginate_document(sample_document, RenderMode.STUDENT, oracle=make_oracle())
        second = paginate_document(sample_document, RenderMode.STUDENT, oracle=make_oracle())

        assert first == second
        assert sample_document.to_dict() == before


class TestBuildMetadata:
    """Tests for _build_metadata() helper."""

    def test_build_metadata_contains_required_fields(self, sample_document, fake_oracle, tmp_path):
        # Arrange
        layout = paginate_document(sample_document, RenderMode.STUDENT, oracle=fake_oracle)

        # Act
        metadata = _build_metadata(
            sample_document, RenderMode.STUDENT, layout, tmp_path / "x.pdf", 0.5,
        )

        # Assert
        for key in ("generated_at", "document_id", "title", "mode", "question_count",
                    "total_points", "page_count", "overflow_pages", "warnings", "pages"):
            assert key in metadata
        assert metadata["mode"] == "student"
        assert metadata["total_points"] == 7.5
        assert metadata["pages"][0]["questions"] == ["q1", "q2", "q3", "q4"]


class TestSlugify:

    @pytest.mark.parametrize("title,expected", [
        ("Photosynthesis Quiz", "photosynthesis_quiz"),
        ("Évaluation n°3 : Fractions", "evaluation_n3_fractions"),
        ("  --  ", ""),
    ])
    def test_slugify(self, title, expected):
        assert slugify(title) == expected


@pytest.mark.e2e
class TestBuildDocument:
    """Full builds through reportlab (real measurement)."""

    def test_when_built_then_pdf_and_metadata_written(self, sample_document, sample_category, tmp_path):
        # Arrange
        config = BuilderConfig(mode=RenderMode.TEACHER, output_dir=tmp_path)

        # Act
        result = build_document(sample_document, config, category=sample_category)

        # Assert
        assert result.pdf_path == tmp_path / "photosynthesis_quiz_teacher.pdf"
        assert result.pdf_path.exists()
        assert result.page_count >= 1
        assert result.total_points == 7.5
        metadata = json.loads((tmp_path / METADATA_FILENAME).read_text(encoding="utf-8"))
        assert metadata["builds"]["teacher"]["page_count"] == result.page_count

    def test_when_both_modes_built_then_metadata_keeps_both(self, sample_document, tmp_path):
        for mode in (RenderMode.TEACHER, RenderMode.STUDENT):
            build_document(sample_document, BuilderConfig(mode=mode, output_dir=tmp_path))

        metadata = json.loads((tmp_path / METADATA_FILENAME).read_text(encoding="utf-8"))
        assert set(metadata["builds"]) == {"teacher", "student"}

    def test_when_previews_requested_then_png_per_page(self, sample_document, tmp_path):
        config = BuilderConfig(mode=RenderMode.STUDENT, output_dir=tmp_path, write_previews=True)

        result = build_document(sample_document, config)

        assert len(result.preview_paths) == result.page_count
        assert result.preview_paths[0].name == "student_page_001.png"

    def test_when_output_not_writable_then_build_error(self, sample_document, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        config = BuilderConfig(mode=RenderMode.TEACHER, output_dir=blocker / "sub")

        with pytest.raises(BuildError):
            build_document(sample_document, config)


class TestBuilderConfig:

    def test_when_mode_is_string_then_raises(self):
        with pytest.raises(ValueError, match="RenderMode"):
            BuilderConfig(mode="teacher")

    def test_when_grade_scale_not_positive_then_raises(self):
        with pytest.raises(ValueError, match="grade_scale"):
            BuilderConfig(grade_scale=0)
