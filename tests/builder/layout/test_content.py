"""
Unit tests for HTML -> ReportLab flowable conversion.
"""

import base64
import io
import logging

import pytest
from PIL import Image
from reportlab.platypus import Paragraph, Spacer

from evaluation_toolkit.builder.layout import ContentFormatter, Typography, stack_height


@pytest.fixture
def formatter(tmp_path):
    return ContentFormatter(Typography(), assets_dir=tmp_path)


def _png_data_uri(width: int = 200, height: int = 100) -> str:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color="red").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


class TestToFlowables:

    @pytest.mark.parametrize("block", ["", "   ", "\n\t"])
    def test_when_blank_then_no_flowables(self, formatter, block):
        assert formatter.to_flowables(block, 400) == []

    def test_when_plain_text_then_one_paragraph(self, formatter):
        flowables = formatter.to_flowables("Just text", 400)

        assert len(flowables) == 1
        assert isinstance(flowables[0], Paragraph)

    def test_when_paragraphs_then_one_flowable_each(self, formatter):
        flowables = formatter.to_flowables("<p>One</p><p>Two</p>\n<div>Three</div>", 400)

        assert len(flowables) == 3

    def test_when_list_then_one_paragraph_per_item(self, formatter):
        flowables = formatter.to_flowables("<ol><li>a</li><li>b</li><li>c</li></ol>", 400)

        assert len(flowables) == 3

    def test_when_list_items_wrap_paragraphs_then_not_duplicated(self, formatter):
        flowables = formatter.to_flowables("<ul><li><p>a</p></li><li><p>b</p></li></ul>", 400)

        assert len(flowables) == 2

    def test_when_blank_line_paragraph_then_spacer(self, formatter):
        flowables = formatter.to_flowables("<p>a</p><p><br></p><p>b</p>", 400)

        assert isinstance(flowables[1], Spacer)

    def test_when_inline_formatting_then_single_paragraph(self, formatter):
        block = "<p>H<sub>2</sub>O is <b>water</b>, <i>x</i><sup>2</sup> <u>under</u></p>"

        flowables = formatter.to_flowables(block, 400)

        assert len(flowables) == 1

    def test_when_special_characters_then_escaped(self, formatter):
        flowables = formatter.to_flowables("<p>1 &lt; 2 &amp;&amp; 3 &gt; 2</p>", 400)

        assert stack_height(flowables, 400) > 0

    def test_when_unknown_tags_then_text_kept(self, formatter):
        flowables = formatter.to_flowables('<p><span style="color:red">red</span> <a href="#">link</a></p>', 400)

        assert len(flowables) == 1


class TestImages:

    def test_when_data_uri_then_image_scaled_to_width(self, formatter):
        # Arrange: 200x100 px at 96 DPI is 150x75 pt
        block = f'<p><img src="{_png_data_uri()}"></p>'

        # Act
        (image,) = formatter.to_flowables(block, 100)

        # Assert
        width, height = image.wrap(100, 1000)
        assert width == pytest.approx(100)
        assert height == pytest.approx(50)

    def test_when_image_narrower_than_width_then_natural_size(self, formatter):
        (image,) = formatter.to_flowables(f'<img src="{_png_data_uri()}">', 400)

        width, height = image.wrap(400, 1000)
        assert width == pytest.approx(150)
        assert height == pytest.approx(75)

    def test_when_relative_path_then_loaded_from_assets(self, formatter, sample_image):
        flowables = formatter.to_flowables(f'<p>Look: <img src="{sample_image.name}"></p>', 400)

        assert len(flowables) == 2

    def test_when_remote_url_then_dropped_with_warning(self, formatter, caplog):
        with caplog.at_level(logging.WARNING):
            flowables = formatter.to_flowables('<img src="https://example.com/a.png">', 400)

        assert flowables == []
        assert "remote image" in caplog.text

    def test_when_asset_missing_then_dropped(self, formatter):
        assert formatter.to_flowables('<img src="missing.png">', 400) == []

    def test_when_data_uri_corrupt_then_dropped(self, formatter):
        assert formatter.to_flowables('<img src="data:image/png;base64,AAAA">', 400) == []


class TestAssetsConfinement:
    """Local images are only read from inside the assets directory."""

    @pytest.fixture
    def layout(self, tmp_path):
        assets = tmp_path / "assets"
        assets.mkdir()
        private = tmp_path / "private"
        private.mkdir()
        Image.new("RGB", (20, 20), color="blue").save(private / "secret.png")
        Image.new("RGB", (20, 20), color="blue").save(assets / "inside.png")
        return ContentFormatter(Typography(), assets_dir=assets), private / "secret.png"

    def test_when_inside_assets_then_loaded(self, layout):
        formatter, _ = layout

        assert len(formatter.to_flowables('<img src="inside.png">', 400)) == 1

    def test_when_absolute_path_outside_then_dropped(self, layout, caplog):
        # Arrange
        formatter, secret = layout

        # Act
        with caplog.at_level(logging.WARNING):
            flowables = formatter.to_flowables(f'<img src="{secret.as_posix()}">', 400)

        # Assert
        assert flowables == []
        assert "outside assets dir" in caplog.text

    def test_when_parent_relative_path_then_dropped(self, layout):
        formatter, _ = layout

        assert formatter.to_flowables('<img src="../private/secret.png">', 400) == []


class TestStackHeight:

    def test_more_text_is_taller(self, formatter):
        short = formatter.to_flowables("<p>short</p>", 300)
        long = formatter.to_flowables("<p>" + "word " * 200 + "</p>", 300)

        assert stack_height(long, 300) > stack_height(short, 300)

    def test_narrower_is_not_shorter(self, formatter):
        block = "<p>" + "word " * 80 + "</p>"

        wide = stack_height(formatter.to_flowables(block, 500), 500)
        narrow = stack_height(formatter.to_flowables(block, 200), 200)

        assert narrow >= wide

    def test_single_line_is_one_leading(self, formatter):
        flowables = formatter.to_flowables("<p>Hi</p>", 400)

        assert stack_height(flowables, 400) == pytest.approx(Typography().leading)

    def test_when_single_trailing_break_then_one_line(self, formatter):
        flowables = formatter.to_flowables("<p>text<br></p>", 400)

        assert stack_height(flowables, 400) == pytest.approx(Typography().leading)

    def test_when_several_trailing_breaks_then_blank_lines_counted(self, formatter):
        # "text" plus two blank lines; the last break only ends the line
        flowables = formatter.to_flowables("text<br><br><br>", 400)

        assert stack_height(flowables, 400) == pytest.approx(3 * Typography().leading)


class TestPlainFallbacks:

    def test_plain_flowables_strip_markup(self, formatter):
        (paragraph,) = formatter.plain_flowables("<p>a <b>b</b></p><ul><li>c</li></ul>")

        assert isinstance(paragraph, Paragraph)

    def test_question_flowables_when_blank_then_empty(self, formatter):
        assert formatter.question_flowables("  ") == []

    def test_section_flowables_upper_case(self, formatter):
        (paragraph,) = formatter.section_flowables("Ex.1 <draft>")

        assert paragraph.getPlainText() == "EX.1 <DRAFT>"
