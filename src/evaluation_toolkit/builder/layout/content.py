"""
Module: builder.layout.content

Purpose:
    Convert stored rich-text HTML blocks into ReportLab flowables.
    The same conversion feeds both the measurement pass and the PDF
    renderer, so a block is measured exactly as it will be drawn.

Key Classes:
    - ContentFormatter: HTML block -> list of Paragraph/Image/Spacer flowables
    - ContentError: Block cannot be converted

Key Functions:
    - build_styles(): Paragraph styles derived from Typography
    - stack_height(): Total height of a flowable stack at a given width

Supported markup:
    p, div, blockquote, h1-h6, ul/ol/li, br, b/strong, i/em, u,
    s/strike/del, sub, sup, img (data: URIs or files under assets_dir).
    Unknown tags contribute their text only.

Dependencies:
    - bs4: HTML parsing
    - reportlab: Paragraph/Image flowables
    - PIL: Image decoding

Used By:
    - builder.layout.measure: Block heights
    - builder.output.renderer: Drawing answer content
"""

from __future__ import annotations

import base64
import binascii
import html
import io
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from PIL import Image, UnidentifiedImageError
from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Flowable, Paragraph, Spacer
from reportlab.platypus import Image as ImageFlowable

from .config import DEFAULT_DPI, Typography

logger = logging.getLogger(__name__)

# Tall enough that a single block never gets clipped while wrapping
WRAP_HEIGHT = 100_000

BLOCK_TAGS = frozenset({
    "p", "div", "blockquote", "pre", "section", "article",
    "h1", "h2", "h3", "h4", "h5", "h6", "li",
})
LIST_TAGS = frozenset({"ul", "ol"})
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

INLINE_MARKUP = {
    "b": ("<b>", "</b>"),
    "strong": ("<b>", "</b>"),
    "i": ("<i>", "</i>"),
    "em": ("<i>", "</i>"),
    "u": ("<u>", "</u>"),
    "s": ("<strike>", "</strike>"),
    "strike": ("<strike>", "</strike>"),
    "del": ("<strike>", "</strike>"),
    "sub": ("<sub>", "</sub>"),
    "sup": ("<super>", "</super>"),
}

_DATA_URI = re.compile(r"^data:image/[\w.+-]+;base64,(?P<payload>.+)$", re.DOTALL)
_REMOTE_URI = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_TRAILING_BREAKS = re.compile(r"(\s*<br/>\s*)+$")


class ContentError(Exception):
    """HTML block cannot be converted to flowables."""
    pass


def build_styles(typography: Typography) -> Dict[str, ParagraphStyle]:
    """
    Create the paragraph styles used for question content.

    Args:
        typography: Font settings

    Returns:
        Dict with "body", "heading", "list", "question" and "section" styles
    """
    body = ParagraphStyle(
        "Body",
        fontName=typography.font_name,
        fontSize=typography.font_size,
        leading=typography.leading,
        textColor=colors.black,
    )
    heading = ParagraphStyle(
        "Heading",
        parent=body,
        fontName=typography.bold_font_name,
        fontSize=typography.font_size * 1.15,
        leading=typography.font_size * 1.15 * typography.leading_ratio,
        spaceAfter=typography.font_size * 0.3,
    )
    list_item = ParagraphStyle(
        "ListItem",
        parent=body,
        leftIndent=typography.font_size * 1.5,
        bulletIndent=typography.font_size * 0.4,
        bulletFontName=typography.font_name,
    )
    question = ParagraphStyle(
        "Question",
        parent=body,
        fontName=typography.bold_font_name,
    )
    section = ParagraphStyle(
        "Section",
        parent=body,
        fontName=typography.bold_font_name,
        fontSize=typography.section_font_size,
        leading=typography.section_leading,
    )
    return {
        "body": body,
        "heading": heading,
        "list": list_item,
        "question": question,
        "section": section,
    }


def stack_height(flowables: List[Flowable], width: float) -> float:
    """
    Height of flowables stacked vertically at the given width.

    Args:
        flowables: Flowables in drawing order
        width: Available width in points

    Returns:
        Height in points, including paragraph spacing
    """
    total = 0.0
    for index, flowable in enumerate(flowables):
        _, height = flowable.wrap(width, WRAP_HEIGHT)
        if index > 0:
            total += flowable.getSpaceBefore()
        total += height
        if index < len(flowables) - 1:
            total += flowable.getSpaceAfter()
    return total


class ContentFormatter:
    """
    Converts question blocks into ReportLab flowables.

    Attributes:
        typography: Font settings shared with the renderer
        assets_dir: Directory that relative image sources resolve against
        image_dpi: Pixel density used to size embedded images

    Example:
        >>> formatter = ContentFormatter(Typography())
        >>> flowables = formatter.to_flowables("<p>Photosynthesis <b>needs</b> light</p>", 400)
        >>> stack_height(flowables, 400)
        18.2
    """

    def __init__(
        self,
        typography: Typography,
        assets_dir: Optional[Path] = None,
        image_dpi: int = DEFAULT_DPI,
    ):
        self.typography = typography
        self.assets_dir = Path(assets_dir) if assets_dir else None
        self.image_dpi = image_dpi
        self.styles = build_styles(typography)
        self._pending_bullet: Optional[str] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    def to_flowables(
        self,
        block: str,
        width: float,
        *,
        text_color: Optional[colors.Color] = None,
    ) -> List[Flowable]:
        """
        Convert a formatted HTML block.

        Args:
            block: HTML fragment (may be plain text)
            width: Available width in points, used to scale images
            text_color: Optional override for all text

        Returns:
            Flowables in drawing order; empty for blank content

        Raises:
            ContentError: If the markup cannot be turned into paragraphs
        """
        if not block or not block.strip():
            return []

        styles = self._styles_with_color(text_color)
        soup = BeautifulSoup(block, "html.parser")
        self._pending_bullet = None

        out: List[Flowable] = []
        buffer: List[str] = []
        self._convert_children(soup, styles["body"], styles, width, out, buffer)
        self._flush(buffer, styles["body"], out)
        return out

    def plain_flowables(
        self,
        block: str,
        *,
        text_color: Optional[colors.Color] = None,
    ) -> List[Flowable]:
        """
        Text-only rendition of a block (all markup stripped).

        Used by the renderer when ``to_flowables`` fails.
        """
        text = BeautifulSoup(block or "", "html.parser").get_text("\n").strip()
        if not text:
            return []
        style = self._styles_with_color(text_color)["body"]
        return [Paragraph(_escape_lines(text), style)]

    def question_flowables(
        self,
        text: str,
        *,
        text_color: Optional[colors.Color] = None,
    ) -> List[Flowable]:
        """Bold question text; plain text with newlines kept."""
        if not text or not text.strip():
            return []
        style = self._styles_with_color(text_color)["question"]
        return [Paragraph(_escape_lines(text.strip()), style)]

    def section_flowables(
        self,
        name: str,
        *,
        text_color: Optional[colors.Color] = None,
    ) -> List[Flowable]:
        """Upper-cased section heading."""
        style = self._styles_with_color(text_color)["section"]
        return [Paragraph(_escape_lines(name.upper()), style)]

    # ─────────────────────────────────────────────────────────────────────────
    # Conversion
    # ─────────────────────────────────────────────────────────────────────────

    def _convert_children(
        self,
        node: Tag,
        style: ParagraphStyle,
        styles: Dict[str, ParagraphStyle],
        width: float,
        out: List[Flowable],
        buffer: List[str],
    ) -> None:
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                buffer.append(html.escape(str(child), quote=False))
                continue
            if not isinstance(child, Tag):
                continue

            name = child.name.lower()

            if name == "br":
                buffer.append("<br/>")
            elif name == "img":
                self._flush(buffer, style, out)
                out.extend(self._image_flowables(child, width))
            elif name in LIST_TAGS:
                self._flush(buffer, style, out)
                self._convert_list(child, styles, width, out)
            elif name in BLOCK_TAGS:
                self._flush(buffer, style, out)
                block_style = styles["heading"] if name in HEADING_TAGS else style
                inner: List[str] = []
                self._convert_children(child, block_style, styles, width, out, inner)
                self._flush(inner, block_style, out)
            elif name in INLINE_MARKUP and not _has_nested_blocks(child):
                open_tag, close_tag = INLINE_MARKUP[name]
                buffer.append(open_tag)
                self._convert_children(child, style, styles, width, out, buffer)
                buffer.append(close_tag)
            else:
                # span, a, font and friends: keep text, drop formatting
                self._convert_children(child, style, styles, width, out, buffer)

    def _convert_list(
        self,
        node: Tag,
        styles: Dict[str, ParagraphStyle],
        width: float,
        out: List[Flowable],
    ) -> None:
        ordered = node.name.lower() == "ol"
        number = 0
        for child in node.children:
            if not isinstance(child, Tag):
                continue
            if child.name.lower() in LIST_TAGS:
                self._convert_list(child, styles, width, out)
                continue
            number += 1
            # Consumed by the first paragraph of the item, even inside <li><p>
            self._pending_bullet = f"{number}." if ordered else "•"
            inner: List[str] = []
            self._convert_children(child, styles["list"], styles, width, out, inner)
            self._flush(inner, styles["list"], out)
            self._pending_bullet = None

    def _flush(
        self,
        buffer: List[str],
        style: ParagraphStyle,
        out: List[Flowable],
    ) -> None:
        if not buffer:
            return
        raw = "".join(buffer)
        buffer.clear()

        trailing = _TRAILING_BREAKS.search(raw)
        markup = (raw[:trailing.start()] if trailing else raw).strip()
        if not markup:
            if "<br/>" in raw:
                # <p><br></p> is an intentionally blank line
                out.append(Spacer(1, style.leading))
            return

        bullet, self._pending_bullet = self._pending_bullet, None
        try:
            out.append(Paragraph(markup, style, bulletText=bullet))
        except ValueError as e:
            raise ContentError(f"Cannot format block: {e}") from e

        # The last break only ends the line; each one before it is a blank line
        blank_lines = trailing.group(0).count("<br/>") - 1 if trailing else 0
        if blank_lines > 0:
            out.append(Spacer(1, blank_lines * style.leading))

    def _styles_with_color(
        self, text_color: Optional[colors.Color]
    ) -> Dict[str, ParagraphStyle]:
        if text_color is None:
            return self.styles
        return {
            name: ParagraphStyle(f"{style.name}-colored", parent=style, textColor=text_color)
            for name, style in self.styles.items()
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Images
    # ─────────────────────────────────────────────────────────────────────────

    def _image_flowables(self, tag: Tag, width: float) -> List[Flowable]:
        src = (tag.get("src") or "").strip()
        if not src:
            return []

        img = self._load_image(src)
        if img is None:
            return []

        width_pt = _dimension(tag.get("width")) or img.width
        height_pt = _dimension(tag.get("height")) or img.height * (width_pt / img.width)
        scale = 72.0 / self.image_dpi
        width_pt *= scale
        height_pt *= scale

        if width_pt > width:
            height_pt *= width / width_pt
            width_pt = width

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return [ImageFlowable(buf, width=width_pt, height=height_pt, hAlign="LEFT")]

    def _load_image(self, src: str) -> Optional[Image.Image]:
        """Decode an inline or local image; None (with a warning) otherwise."""
        match = _DATA_URI.match(src)
        try:
            if match:
                data = base64.b64decode(match.group("payload"), validate=False)
                img = Image.open(io.BytesIO(data))
            elif _REMOTE_URI.match(src):
                logger.warning(f"Skipping remote image (not fetched): {src[:80]}")
                return None
            elif self.assets_dir is not None:
                path = (self.assets_dir / src).resolve()
                if not _is_within(path, self.assets_dir.resolve()):
                    logger.warning(f"Skipping image outside assets dir: {src[:80]}")
                    return None
                if not path.is_file():
                    logger.warning(f"Image not found: {path}")
                    return None
                img = Image.open(path)
            else:
                logger.warning(f"Skipping relative image without assets dir: {src[:80]}")
                return None
            img.load()
        except (binascii.Error, UnidentifiedImageError, OSError) as e:
            logger.warning(f"Unreadable image {src[:40]}: {e}")
            return None

        if img.mode not in ("RGB", "RGBA", "L"):
            img = img.convert("RGBA")
        return img


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def _has_nested_blocks(tag: Tag) -> bool:
    return tag.find(["img", *BLOCK_TAGS, *LIST_TAGS]) is not None


def _dimension(value: object) -> Optional[float]:
    """Parse an HTML width/height attribute ("120" or "120px")."""
    if value is None:
        return None
    text = str(value).strip().lower().removesuffix("px")
    try:
        number = float(text)
    except ValueError:
        return None
    return number if number > 0 else None


def _escape_lines(text: str) -> str:
    return "<br/>".join(html.escape(line, quote=False) for line in text.splitlines())
