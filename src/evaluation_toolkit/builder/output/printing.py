"""
Module: builder.output.printing

Purpose:
    Hand a finished PDF to the operating system, either to the default
    printer or to the default viewer. This is the whole "print" surface:
    everything visible on paper was decided before the PDF was written.

Key Functions:
    - request_print(): Send a PDF to the default printer
    - open_pdf(): Open a PDF in the system viewer

Dependencies:
    - platform, subprocess (std)

Used By:
    - evaluation_toolkit.__main__: "build --print"
"""

from __future__ import annotations

import logging
import os
import platform
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class PrintError(Exception):
    """The operating system could not print or open a document."""
    pass


def request_print(pdf_path: Path) -> None:
    """
    Send a PDF to the default printer.

    Uses ``lp`` on macOS and Linux (CUPS) and the shell "print" verb on
    Windows.

    Args:
        pdf_path: PDF to print

    Raises:
        PrintError: If the file is missing or the print command fails
    """
    if not pdf_path.is_file():
        raise PrintError(f"File does not exist: {pdf_path}")

    system = platform.system()
    try:
        if system == "Windows":
            os.startfile(str(pdf_path), "print")
        else:
            subprocess.run(["lp", str(pdf_path)], check=True, capture_output=True)
    except FileNotFoundError as e:
        raise PrintError(f"Print command not found for {system}") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode(errors="replace").strip()
        raise PrintError(f"Print command failed: {stderr or e}") from e
    except OSError as e:
        raise PrintError(f"Failed to print {pdf_path.name}: {e}") from e

    logger.info(f"Sent {pdf_path.name} to the default printer")


def open_pdf(pdf_path: Path) -> None:
    """
    Open a PDF in the system's default viewer.

    Raises:
        PrintError: If the file is missing or no viewer command exists
    """
    if not pdf_path.is_file():
        raise PrintError(f"File does not exist: {pdf_path}")

    system = platform.system()
    try:
        if system == "Darwin":  # macOS
            subprocess.Popen(["open", str(pdf_path)])
        elif system == "Windows":
            os.startfile(str(pdf_path))
        else:  # Linux
            subprocess.Popen(["xdg-open", str(pdf_path)])
    except FileNotFoundError as e:
        raise PrintError(f"Viewer command not found for {system}") from e
    except OSError as e:
        raise PrintError(f"Failed to open {pdf_path.name}: {e}") from e
