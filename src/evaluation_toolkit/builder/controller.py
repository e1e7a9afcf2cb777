"""
Module: builder.controller

Purpose:
    Orchestrate the evaluation layout and build pipeline.
    Flatten → Measure → Size → Paginate → Render → Metadata

Key Functions:
    - paginate_document(): Pure layout of one document in one mode
    - build_document(): Main entry point: layout, PDF, metadata, previews

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - builder.layout: Flattening, measurement, sizing, pagination
    - builder.output: PDF rendering and previews
    - storage.file_locking: Locked metadata updates

Used By:
    - evaluation_toolkit.__main__: CLI
"""

from __future__ import annotations

import logging
import re
import time
import unicodedata
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from evaluation_toolkit.core.models import Category, Document
from evaluation_toolkit.storage.file_locking import locked_read_modify_write_json

from .config import BuilderConfig
from .layout import (
    ContentFormatter,
    LayoutResult,
    MeasurementOracle,
    PageGeometry,
    QuestionItem,
    RenderMode,
    ReportLabOracle,
    SectionItem,
    Typography,
    flatten,
    measure_items,
    paginate,
    size_items,
)
from .output.preview import write_previews
from .output.renderer import render_to_pdf

logger = logging.getLogger(__name__)

METADATA_FILENAME = "build_metadata.json"


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        pdf_path: Path to the generated PDF
        mode: Copy that was rendered
        layout: Page assignment used for rendering
        page_count: Number of pages generated
        total_points: Sum of question points
        metadata: Build metadata dictionary for this mode
        warnings: Any warnings during build
        preview_paths: PNG previews (empty unless requested)

    Example:
        >>> result = build_document(document, BuilderConfig(mode=RenderMode.STUDENT))
        >>> print(f"Generated {result.page_count} pages worth {result.total_points} points")
    """
    pdf_path: Path
    mode: RenderMode
    layout: LayoutResult
    page_count: int
    total_points: float
    metadata: dict
    warnings: tuple[str, ...]
    preview_paths: tuple[Path, ...] = ()


def paginate_document(
    document: Document,
    mode: RenderMode,
    *,
    geometry: Optional[PageGeometry] = None,
    typography: Optional[Typography] = None,
    oracle: Optional[MeasurementOracle] = None,
    assets_dir: Optional[Path] = None,
) -> LayoutResult:
    """
    Compute the page assignment for one copy of a document.

    Pure with respect to its inputs: no files are written and the document
    is not modified, so calling it twice gives identical pages.

    Pipeline:
    1. Flatten the section/question tree into items
    2. Measure every block (one pass, cached in a MeasurementTable)
    3. Size items for the mode (ruled lines for the student copy)
    4. Paginate

    Args:
        document: Document to lay out
        mode: Teacher or student copy
        geometry: Page geometry (defaults to A4 at 96 DPI)
        typography: Fonts used for measurement
        oracle: Measurement oracle (defaults to ReportLabOracle)
        assets_dir: Image directory for the default oracle

    Returns:
        LayoutResult; measurement fallbacks are included in its warnings

    Example:
        >>> layout = paginate_document(document, RenderMode.STUDENT)
        >>> layout.page_count
        2
    """
    geometry = geometry or PageGeometry()
    typography = typography or Typography()
    oracle = oracle or ReportLabOracle(geometry, typography, assets_dir=assets_dir)

    items = flatten(document)
    if not items:
        logger.info(f"Document {document.id} has no questions")
        return LayoutResult(pages=())

    table = measure_items(items, oracle, geometry)
    sized = size_items(items, table, geometry, mode)
    layout = paginate(sized, geometry)

    if table.failures:
        layout = replace(layout, warnings=table.failures + layout.warnings)
    return layout


def build_document(
    document: Document,
    config: BuilderConfig,
    *,
    category: Optional[Category] = None,
    oracle: Optional[MeasurementOracle] = None,
) -> BuildResult:
    """
    Build one copy of an evaluation from start to finish.

    Pipeline:
    1. Paginate the document for config.mode
    2. Render the PDF
    3. (Optional) Write PNG previews
    4. Record build metadata

    Args:
        document: Document to build
        config: Build configuration
        category: Resolved category for the title banner
        oracle: Measurement oracle (defaults to ReportLabOracle)

    Returns:
        BuildResult with paths and metadata

    Raises:
        BuildError: If rendering or writing output fails

    Example:
        >>> config = BuilderConfig(mode=RenderMode.TEACHER, output_dir=Path("out"))
        >>> result = build_document(document, config)
        >>> result.pdf_path
        PosixPath('out/photosynthesis_quiz_teacher.pdf')
    """
    start_time = time.perf_counter()
    mode = config.mode

    logger.info(f"Starting {mode.value} build for {document.id} ({document.title!r})")

    # Measurement and rendering must share typography and image handling
    formatter = ContentFormatter(
        config.typography,
        assets_dir=config.assets_dir,
        image_dpi=config.geometry.dpi,
    )
    oracle = oracle or ReportLabOracle(
        config.geometry, config.typography, formatter=formatter,
    )

    # 1. Paginate
    layout = paginate_document(
        document,
        mode,
        geometry=config.geometry,
        typography=config.typography,
        oracle=oracle,
    )
    warnings: List[str] = list(layout.warnings)
    logger.info(f"Paginated onto {layout.page_count} pages")

    # 2. Render PDF
    output_dir = Path(config.output_dir)
    pdf_path = output_dir / f"{slugify(document.title) or document.id}_{mode.value}.pdf"
    try:
        render_to_pdf(
            layout,
            pdf_path,
            document=document,
            mode=mode,
            geometry=config.geometry,
            typography=config.typography,
            category=category,
            formatter=formatter,
            grade_scale=config.grade_scale,
            show_footer=config.show_footer,
        )
    except OSError as e:
        raise BuildError(f"Failed to write {pdf_path}: {e}") from e
    logger.info(f"Rendered PDF: {pdf_path}")

    # 3. Previews (optional)
    preview_paths: tuple[Path, ...] = ()
    if config.write_previews:
        try:
            preview_paths = tuple(write_previews(
                pdf_path,
                output_dir / "previews",
                prefix=mode.value,
                dpi=config.preview_dpi,
            ))
        except (OSError, RuntimeError) as e:
            raise BuildError(f"Failed to write previews: {e}") from e

    elapsed = time.perf_counter() - start_time
    logger.info(f"Build completed in {elapsed:.2f}s")

    # 4. Write metadata
    metadata = _build_metadata(document, mode, layout, pdf_path, elapsed)
    _write_metadata(output_dir, mode, metadata)

    for warning in warnings:
        logger.debug(f"Build warning: {warning}")

    return BuildResult(
        pdf_path=pdf_path,
        mode=mode,
        layout=layout,
        page_count=layout.page_count,
        total_points=document.total_points,
        metadata=metadata,
        warnings=tuple(warnings),
        preview_paths=preview_paths,
    )


def slugify(text: str) -> str:
    """
    File-name-safe version of a title.

    Example:
        >>> slugify("Évaluation 3 : Photosynthèse")
        'evaluation_3_photosynthese'
    """
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "_", ascii_text.lower()).strip("_")


def _build_metadata(
    document: Document,
    mode: RenderMode,
    layout: LayoutResult,
    pdf_path: Path,
    elapsed: float,
) -> dict:
    """
    Build metadata dictionary for one rendered copy.

    Contains:
    - Document identity and totals
    - Page count, overflowing pages and warnings
    - Per-page manifest of section names and question ids
    - Timestamp

    Returns:
        Metadata dictionary ready for JSON serialization
    """
    pages = []
    for page in layout.pages:
        pages.append({
            "page": page.page_number,
            "sections": [
                item.section_name for item in page.items if isinstance(item, SectionItem)
            ],
            "questions": [
                item.question_id for item in page.items if isinstance(item, QuestionItem)
            ],
            "height_used": round(page.height_used, 2),
            "max_height": page.max_height,
        })

    return {
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "document_id": document.id,
        "title": document.title,
        "mode": mode.value,
        "pdf": pdf_path.name,
        "question_count": document.question_count,
        "total_points": document.total_points,
        "page_count": layout.page_count,
        "overflow_pages": layout.overflow_pages,
        "warnings": list(layout.warnings),
        "build_seconds": round(elapsed, 3),
        "pages": pages,
    }


def _write_metadata(output_dir: Path, mode: RenderMode, metadata: dict) -> None:
    """
    Record a build in output_dir/build_metadata.json.

    The file holds one entry per mode, so building both copies into the
    same directory keeps both records.

    Raises:
        BuildError: If writing fails
    """
    metadata_path = output_dir / METADATA_FILENAME

    def merge(existing: dict) -> dict:
        builds = existing.get("builds") if isinstance(existing, dict) else None
        builds = dict(builds) if isinstance(builds, dict) else {}
        builds[mode.value] = metadata
        return {"builds": builds}

    try:
        locked_read_modify_write_json(metadata_path, merge)
        logger.debug(f"Wrote metadata to {metadata_path}")
    except (OSError, ValueError) as e:
        raise BuildError(f"Failed to write metadata: {e}") from e
