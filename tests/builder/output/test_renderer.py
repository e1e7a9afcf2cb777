"""
PDF rendering tests.

Lays documents out with the real oracle and inspects the written PDF
with pypdf: page size, page count and the header/footer text.
"""

import pytest

try:
    from pypdf import PdfReader
    PYPDF_AVAILABLE = True
except ImportError:
    PYPDF_AVAILABLE = False

from evaluation_toolkit.builder import PageGeometry, RenderMode, paginate_document
from evaluation_toolkit.builder.layout import LayoutResult
from evaluation_toolkit.builder.output import render_to_pdf
from evaluation_toolkit.builder.output.renderer import _format_points, _transform_y
from evaluation_toolkit.core.models import Document


# A4 dimensions in points (1/72 inch)
A4_WIDTH_PT = 595.276  # 210mm
A4_HEIGHT_PT = 841.890  # 297mm
TOLERANCE_PT = 1.0


@pytest.fixture
def long_document(question_factory) -> Document:
    """Enough ruled answers to need several pages."""
    answer = "<p>" + "The light-dependent reactions happen in the thylakoids. " * 12 + "</p>"
    questions = tuple(
        question_factory(f"q{n}", f"Part {n // 4 + 1}", answer=answer, order_index=n)
        for n in range(16)
    )
    return Document(id="long", title="Long Test", questions=questions)


def _render(document, mode, tmp_path, **kwargs):
    layout = paginate_document(document, mode)
    pdf_path = tmp_path / f"{mode.value}.pdf"
    render_to_pdf(layout, pdf_path, document=document, mode=mode, **kwargs)
    return layout, pdf_path


@pytest.mark.skipif(not PYPDF_AVAILABLE, reason="pypdf not installed")
class TestRenderedPdf:

    @pytest.mark.parametrize("mode", [RenderMode.TEACHER, RenderMode.STUDENT])
    def test_one_pdf_page_per_layout_page(self, long_document, tmp_path, mode):
        # Act
        layout, pdf_path = _render(long_document, mode, tmp_path)

        # Assert
        reader = PdfReader(pdf_path)
        assert layout.page_count > 1
        assert len(reader.pages) == layout.page_count

    def test_all_pages_are_a4_size(self, sample_document, tmp_path):
        _, pdf_path = _render(sample_document, RenderMode.STUDENT, tmp_path)

        for i, page in enumerate(PdfReader(pdf_path).pages):
            box = page.mediabox
            assert abs(float(box.width) - A4_WIDTH_PT) < TOLERANCE_PT, f"Page {i+1} width"
            assert abs(float(box.height) - A4_HEIGHT_PT) < TOLERANCE_PT, f"Page {i+1} height"

    def test_header_on_first_page_only(self, long_document, tmp_path):
        _, pdf_path = _render(long_document, RenderMode.STUDENT, tmp_path)

        pages = [page.extract_text() for page in PdfReader(pdf_path).pages]
        assert "GRADE" in pages[0]
        assert "/ 20" in pages[0]
        assert all("GRADE" not in text for text in pages[1:])

    def test_footer_numbers_every_page(self, long_document, tmp_path):
        layout, pdf_path = _render(long_document, RenderMode.TEACHER, tmp_path)

        total = layout.page_count
        for number, page in enumerate(PdfReader(pdf_path).pages, start=1):
            text = page.extract_text()
            assert f"Page {number} / {total}" in text
            assert "LONG TEST" in text

    def test_when_footer_disabled_then_no_page_numbers(self, sample_document, tmp_path):
        _, pdf_path = _render(sample_document, RenderMode.TEACHER, tmp_path, show_footer=False)

        assert "Page 1 /" not in PdfReader(pdf_path).pages[0].extract_text()

    def test_grade_scale_printed(self, sample_document, tmp_path):
        _, pdf_path = _render(sample_document, RenderMode.STUDENT, tmp_path, grade_scale=40)

        assert "/ 40" in PdfReader(pdf_path).pages[0].extract_text()

    def test_teacher_copy_shows_model_answers(self, sample_document, tmp_path):
        _, teacher_pdf = _render(sample_document, RenderMode.TEACHER, tmp_path)
        _, student_pdf = _render(sample_document, RenderMode.STUDENT, tmp_path)

        teacher_text = PdfReader(teacher_pdf).pages[0].extract_text()
        student_text = PdfReader(student_pdf).pages[0].extract_text()
        assert "Chlorophyll" in teacher_text
        assert "Chlorophyll" not in student_text

    def test_student_copy_shows_prompt(self, sample_document, tmp_path):
        _, pdf_path = _render(sample_document, RenderMode.STUDENT, tmp_path)

        assert "Label the leaf" in PdfReader(pdf_path).pages[0].extract_text()

    def test_when_layout_empty_then_pdf_still_written(self, tmp_path):
        pdf_path = tmp_path / "out" / "empty.pdf"

        render_to_pdf(
            LayoutResult(pages=()), pdf_path,
            document=Document(id="d", title="Empty"), mode=RenderMode.STUDENT,
        )

        assert pdf_path.exists()

    def test_when_markup_broken_then_page_still_rendered(self, question_factory, tmp_path):
        # Arrange: unclosed tags must not abort the PDF
        doc = Document(id="d", title="T", questions=(
            question_factory("q1", answer="<p><b>bold <i>and italic</p><ul><li>x"),
        ))

        # Act
        layout, pdf_path = _render(doc, RenderMode.TEACHER, tmp_path)

        # Assert
        assert len(PdfReader(pdf_path).pages) == layout.page_count == 1


class TestHelpers:

    def test_transform_y_flips_axis_in_points(self):
        geometry = PageGeometry()

        assert _transform_y(geometry, 0) == pytest.approx(1123 * 0.75)
        assert _transform_y(geometry, 1123) == pytest.approx(0)

    @pytest.mark.parametrize("points,expected", [(2, "2"), (1.5, "1.5"), (0.25, "0.25")])
    def test_format_points(self, points, expected):
        assert _format_points(points) == expected
