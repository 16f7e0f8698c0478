"""Page sentinel handling for concatenated document markup."""

from __future__ import annotations

from collections.abc import Sequence

# Block-level, non-editable rule the editing surface never emits through
# normal formatting.
PAGE_BREAK = '<hr class="page-break" contenteditable="false">'


def join(pages: Sequence[str]) -> str:
    return PAGE_BREAK.join(pages)


def split(blob: str) -> list[str]:
    return blob.split(PAGE_BREAK)


def append_page(blob: str) -> str:
    """Return ``blob`` with a new empty page appended."""

    return blob + PAGE_BREAK


def page_count(blob: str) -> int:
    return blob.count(PAGE_BREAK) + 1


__all__ = ["PAGE_BREAK", "append_page", "join", "page_count", "split"]
