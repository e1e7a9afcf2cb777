"""
Module: builder.output.preview

Purpose:
    Rasterise a rendered PDF into one PNG per page, for on-screen preview
    of the exact pages that will be printed.

Key Functions:
    - render_page_image(): One page -> PIL image
    - write_previews(): All pages -> PNG files

Dependencies:
    - fitz (PyMuPDF): PDF rasterisation
    - PIL: PNG encoding

Used By:
    - builder.controller: Optional preview export
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import fitz
from PIL import Image

logger = logging.getLogger(__name__)


def render_page_image(doc: fitz.Document, page_idx: int, dpi: int) -> Image.Image:
    """
    Render one page to an RGB image.

    Args:
        doc: Open PyMuPDF document
        page_idx: 0-indexed page number
        dpi: Resolution for rendering

    Returns:
        Full-page RGB image
    """
    page = doc[page_idx]
    matrix = fitz.Matrix(dpi / 72.0, dpi / 72.0)
    pix = page.get_pixmap(matrix=matrix, alpha=False)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def write_previews(
    pdf_path: Path,
    output_dir: Path,
    *,
    prefix: str = "page",
    dpi: int = 96,
) -> List[Path]:
    """
    Write a PNG preview of every page of a PDF.

    Files are named ``<prefix>_page_001.png``, ``<prefix>_page_002.png``...

    Args:
        pdf_path: Rendered PDF
        output_dir: Directory for the PNG files (created if needed)
        prefix: File name prefix, usually the render mode
        dpi: Preview resolution (96 gives one pixel per layout unit)

    Returns:
        Paths of the written files in page order
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    paths: List[Path] = []

    with fitz.open(pdf_path) as doc:
        for page_idx in range(doc.page_count):
            image = render_page_image(doc, page_idx, dpi)
            path = output_dir / f"{prefix}_page_{page_idx + 1:03d}.png"
            image.save(path, format="PNG")
            paths.append(path)
            logger.debug(f"Wrote preview {path.name} ({image.width}x{image.height})")

    logger.info(f"Wrote {len(paths)} previews to {output_dir}")
    return paths
