"""
Module: builder.output

Purpose:
    Output generation for evaluations: PDF rendering, PNG previews and
    handing the result to the printer.

Key Functions:
    - render_to_pdf(): Render LayoutResult to PDF
    - write_previews(): Rasterise PDF pages to PNG
    - request_print(): Send a PDF to the default printer

Dependencies:
    - reportlab: PDF generation
    - fitz (PyMuPDF): Rasterisation
    - PIL: Image handling

Used By:
    - builder.controller: Main build controller
"""

from .renderer import render_to_pdf
from .preview import render_page_image, write_previews
from .printing import PrintError, open_pdf, request_print

__all__ = [
    "render_to_pdf",
    "render_page_image",
    "write_previews",
    "PrintError",
    "open_pdf",
    "request_print",
]
