"""Export renderers."""

from __future__ import annotations

from .renderers import (
    SUPPORTED_FORMATS,
    ExportResult,
    export_document,
    export_filename,
    render_docx,
    render_html,
    render_json,
    render_pdf,
    render_png,
    render_text,
)

__all__ = [
    "SUPPORTED_FORMATS",
    "ExportResult",
    "export_document",
    "export_filename",
    "render_docx",
    "render_html",
    "render_json",
    "render_pdf",
    "render_png",
    "render_text",
]
