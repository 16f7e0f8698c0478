"""One-way renderers turning a document into downloadable files."""

from __future__ import annotations

import io
import json
import textwrap
import xml.sax.saxutils as saxutils
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Any, Callable

from docx import Document as DocxDocument
from jinja2 import BaseLoader, Environment
from loguru import logger
from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from docsys.documents import access
from docsys.documents.models import Document
from docsys.errors import AccessDeniedError, ExportError
from docsys.sharing.codec import VISIBLE_SEPARATOR

_BLOCK_TAGS = {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre"}
_HEADING_LEVELS = {"h1": 1, "h2": 2, "h3": 3}

_IMAGE_WIDTH = 816
_IMAGE_MARGIN = 40
_IMAGE_WRAP_COLUMNS = 110

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title|e }}</title>
</head>
<body>
{% for page in pages %}
<section class="page">
{{ page }}
</section>
{% if not loop.last %}{{ separator }}{% endif %}
{% endfor %}
</body>
</html>
"""


@dataclass(frozen=True, slots=True)
class ExportResult:
    filename: str
    media_type: str
    data: bytes


@dataclass(slots=True)
class _Block:
    tag: str
    text: str


class _BlockCollector(HTMLParser):
    """Collects top-level text blocks from a page of editor markup."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.blocks: list[_Block] = []
        self._tag = "p"
        self._parts: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _BLOCK_TAGS:
            self._flush()
            self._tag = tag
        elif tag == "br":
            self._parts.append("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in _BLOCK_TAGS:
            self._flush()
            self._tag = "p"

    def handle_data(self, data: str) -> None:
        self._parts.append(data)

    def close(self) -> None:
        super().close()
        self._flush()

    def _flush(self) -> None:
        text = "".join(self._parts).strip()
        if text:
            self.blocks.append(_Block(self._tag, text))
        self._parts = []


def _blocks(page: str) -> list[_Block]:
    collector = _BlockCollector()
    collector.feed(page)
    collector.close()
    return collector.blocks


def _require_access(doc: Document, password: str | None) -> None:
    if not access.check(doc, password).granted:
        raise AccessDeniedError(f"Document {doc.id} is password protected")


def export_filename(doc: Document, fmt: str) -> str:
    return f"{doc.title.replace(' ', '_')}.{fmt}"


def render_text(doc: Document) -> str:
    pages = ["\n".join(block.text for block in _blocks(page)) for page in doc.content]
    return "\n\n".join(pages).strip() + "\n"


def render_json(doc: Document) -> str:
    return json.dumps(
        {"title": doc.title, "content": doc.content, "updatedAt": doc.updated_at},
        indent=2,
        ensure_ascii=False,
    )


def render_html(doc: Document) -> str:
    env = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)
    template = env.from_string(_HTML_TEMPLATE)
    # Markup is inserted verbatim; only the title is escaped.
    return template.render(
        title=doc.title,
        pages=doc.content,
        separator=VISIBLE_SEPARATOR,
    )


def render_docx(doc: Document) -> bytes:
    document = DocxDocument()
    document.core_properties.title = doc.title
    for index, page in enumerate(doc.content):
        if index:
            document.add_page_break()
        for block in _blocks(page):
            level = _HEADING_LEVELS.get(block.tag)
            if level is not None:
                document.add_heading(block.text, level=level)
            else:
                document.add_paragraph(block.text)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def render_pdf(doc: Document) -> bytes:
    """Lay the pages out on A4, one document page starting each PDF page."""

    styles = getSampleStyleSheet()
    buffer = io.BytesIO()
    template = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=doc.title,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
    )

    story: list[Any] = []
    for index, page in enumerate(doc.content):
        if index:
            story.append(PageBreak())
        blocks = _blocks(page)
        if not blocks:
            story.append(Spacer(1, 0.5 * cm))
        for block in blocks:
            level = _HEADING_LEVELS.get(block.tag)
            style = styles[f"Heading{level}"] if level is not None else styles["Normal"]
            text = saxutils.escape(block.text).replace("\n", "<br/>")
            story.append(Paragraph(text, style))

    template.build(story)
    return buffer.getvalue()


def render_png(doc: Document) -> bytes:
    """Snapshot every page into one white image, pages split by a rule."""

    font = ImageFont.load_default()
    line_height = font.getbbox("Ag")[3] + 6

    # None marks a page boundary.
    rows: list[str | None] = []
    for index, page in enumerate(doc.content):
        if index:
            rows.append(None)
        for block in _blocks(page):
            for line in block.text.split("\n"):
                rows.extend(textwrap.wrap(line, _IMAGE_WRAP_COLUMNS) or [""])
            rows.append("")

    height = 2 * _IMAGE_MARGIN + max(len(rows), 1) * line_height
    image = Image.new("RGB", (_IMAGE_WIDTH, height), "white")
    draw = ImageDraw.Draw(image)
    y = _IMAGE_MARGIN
    for row in rows:
        if row is None:
            middle = y + line_height // 2
            draw.line([(_IMAGE_MARGIN, middle), (_IMAGE_WIDTH - _IMAGE_MARGIN, middle)], fill="#999999", width=1)
        elif row:
            draw.text((_IMAGE_MARGIN, y), row, fill="black", font=font)
        y += line_height

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


_FORMATS: dict[str, tuple[str, Callable[[Document], str | bytes]]] = {
    "txt": ("text/plain", render_text),
    "json": ("application/json", render_json),
    "html": ("text/html", render_html),
    "docx": (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        render_docx,
    ),
    "pdf": ("application/pdf", render_pdf),
    "png": ("image/png", render_png),
}

SUPPORTED_FORMATS: tuple[str, ...] = tuple(_FORMATS)


def export_document(doc: Document, fmt: str, *, password: str | None = None) -> ExportResult:
    """Render ``doc`` as ``fmt``; protected documents need their password."""

    fmt = fmt.lower()
    if fmt not in _FORMATS:
        raise ExportError(f"Unsupported export format {fmt!r}; expected one of {', '.join(SUPPORTED_FORMATS)}")
    _require_access(doc, password)

    media_type, renderer = _FORMATS[fmt]
    rendered = renderer(doc)
    data = rendered.encode("utf-8") if isinstance(rendered, str) else rendered
    logger.debug("Exported document {} as {} ({} bytes)", doc.id, fmt, len(data))
    return ExportResult(filename=export_filename(doc, fmt), media_type=media_type, data=data)


__all__ = [
    "ExportResult",
    "SUPPORTED_FORMATS",
    "export_document",
    "export_filename",
    "render_docx",
    "render_html",
    "render_json",
    "render_pdf",
    "render_png",
    "render_text",
]
