from __future__ import annotations

import pytest

from docsys.documents import pages
from docsys.documents.pages import PAGE_BREAK


@pytest.mark.parametrize(
    "content",
    [
        ["<p>only page</p>"],
        ["<h1>A</h1>", "<p>B</p>"],
        ["", "<p>middle</p>", ""],
        [""],
        ["<hr>", "<p>a plain rule is not a page break</p>"],
    ],
)
def test_split_reverses_join(content: list[str]) -> None:
    assert pages.split(pages.join(content)) == content


def test_join_uses_sentinel_between_pages() -> None:
    assert pages.join(["a", "b"]) == f"a{PAGE_BREAK}b"


def test_empty_blob_is_one_blank_page() -> None:
    assert pages.split("") == [""]


def test_append_page_adds_trailing_empty_page() -> None:
    blob = pages.append_page("<p>one</p>")

    assert pages.split(blob) == ["<p>one</p>", ""]
    assert pages.page_count(blob) == 2
