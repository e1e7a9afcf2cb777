"""
Command-line entry point.

Usage:
    python -m evaluation_toolkit build quiz.json --mode both --output out/
    python -m evaluation_toolkit build --id quiz-3 --store workspace/store --print
    python -m evaluation_toolkit build quiz.json --mode student --open
    python -m evaluation_toolkit layout quiz.json --mode student
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from evaluation_toolkit import __version__
from evaluation_toolkit.builder import (
    BuildError,
    BuilderConfig,
    RenderMode,
    build_document,
    paginate_document,
)
from evaluation_toolkit.builder.layout import LayoutResult, QuestionItem, SectionItem
from evaluation_toolkit.builder.output import PrintError, open_pdf, request_print
from evaluation_toolkit.core.models import Category, Document
from evaluation_toolkit.core.schemas import ValidationError
from evaluation_toolkit.core.utils.serialization import load_document_json
from evaluation_toolkit.storage import DocumentRepository, StorageError

logger = logging.getLogger("evaluation_toolkit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="evaluation_toolkit",
        description="Lay out and render teacher/student copies of an evaluation",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Render PDF copies of a document")
    _add_source_arguments(build)
    build.add_argument("--mode", choices=["teacher", "student", "both"], default="both",
                       help="Copy to render (default: both)")
    build.add_argument("--output", "-o", type=Path, default=Path("output"),
                       help="Output directory (default: ./output)")
    build.add_argument("--assets", type=Path, help="Directory for relative image sources")
    build.add_argument("--grade-scale", type=int, default=20,
                       help="Denominator of the grade cell (default: 20)")
    build.add_argument("--no-footer", action="store_true", help="Omit title and page numbers")
    build.add_argument("--previews", action="store_true", help="Also write PNG page previews")
    build.add_argument("--print", dest="send_to_printer", action="store_true",
                       help="Send the rendered PDFs to the default printer")
    build.add_argument("--open", dest="open_viewer", action="store_true",
                       help="Open the rendered PDFs in the system viewer")
    build.set_defaults(handler=_cmd_build)

    layout = subparsers.add_parser("layout", help="Show the page assignment without rendering")
    _add_source_arguments(layout)
    layout.add_argument("--mode", choices=["teacher", "student"], default="student")
    layout.add_argument("--assets", type=Path, help="Directory for relative image sources")
    layout.set_defaults(handler=_cmd_layout)

    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("document", nargs="?", type=Path, help="Path to a document JSON file")
    parser.add_argument("--id", dest="document_id", help="Document id in the store")
    parser.add_argument("--store", type=Path, help="Document store directory")
    parser.add_argument("--strict", action="store_true",
                        help="Validate document files against the JSON schema")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.document is None and not (args.document_id and args.store):
        parser.error("give a document file, or --id together with --store")

    try:
        return args.handler(args)
    except (ValidationError, StorageError, BuildError, PrintError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1


def _load_source(args: argparse.Namespace) -> Tuple[Document, Optional[Category]]:
    """Load the document (file or store) and resolve its category from the store."""
    if args.document is not None:
        document = load_document_json(args.document, strict=args.strict)
    else:
        document = DocumentRepository(args.store).load_document(args.document_id)

    category = None
    if args.store is not None and document.category_id:
        category = DocumentRepository(args.store).get_category(document.category_id)
        if category is None:
            logger.warning(f"Category {document.category_id!r} not found, using default color")
    return document, category


def _cmd_build(args: argparse.Namespace) -> int:
    document, category = _load_source(args)
    modes = (
        [RenderMode.TEACHER, RenderMode.STUDENT]
        if args.mode == "both"
        else [RenderMode.parse(args.mode)]
    )

    results = []
    for mode in modes:
        config = BuilderConfig(
            mode=mode,
            output_dir=args.output,
            assets_dir=args.assets,
            grade_scale=args.grade_scale,
            show_footer=not args.no_footer,
            write_previews=args.previews,
        )
        result = build_document(document, config, category=category)
        results.append(result)
        print(f"{mode.value}: {result.pdf_path} ({result.page_count} pages)")
        for warning in result.warnings:
            print(f"  warning: {warning}")

    if args.send_to_printer:
        for result in results:
            request_print(result.pdf_path)
    if args.open_viewer:
        for result in results:
            open_pdf(result.pdf_path)
    return 0


def _cmd_layout(args: argparse.Namespace) -> int:
    document, _ = _load_source(args)
    mode = RenderMode.parse(args.mode)
    layout = paginate_document(document, mode, assets_dir=args.assets)
    for line in format_layout(layout):
        print(line)
    return 0


def format_layout(layout: LayoutResult) -> List[str]:
    """
    Human-readable page assignment.

    Example:
        Page 1 (432/809): [Ex.1] q1 q2
        Page 2 (120/1014): q3
    """
    if layout.page_count == 0:
        return ["(no pages)"]

    lines = []
    for page in layout.pages:
        labels = []
        for item in page.items:
            if isinstance(item, SectionItem):
                labels.append(f"[{item.section_name}]")
            elif isinstance(item, QuestionItem):
                labels.append(item.question_id)
        flag = " OVERFLOW" if page.overflowing else ""
        lines.append(
            f"Page {page.page_number} ({page.height_used:.0f}/{page.max_height}){flag}: "
            + " ".join(labels)
        )
    lines.extend(f"warning: {warning}" for warning in layout.warnings)
    return lines


if __name__ == "__main__":
    sys.exit(main())
