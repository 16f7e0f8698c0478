"""Self-contained share tokens carrying a document's title and content.

A token is the URL-safe base64 form of the compact JSON object
``{"title": ..., "content": ...}``. The whole document travels inside the
link, so link length grows with document size.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote, urldefrag

from docsys.documents.models import Document
from docsys.errors import ShareDecodeError

# Kept visible after import: multi-page documents arrive as a single page.
VISIBLE_SEPARATOR = "<br><hr><br>"
SHARE_ROUTE = "/share/"


@dataclass(frozen=True, slots=True)
class SharePayload:
    title: str
    content: str

    def as_dict(self) -> dict[str, str]:
        return {"title": self.title, "content": self.content}


def flatten(pages: Sequence[str]) -> str:
    return VISIBLE_SEPARATOR.join(pages)


def encode(doc: Document) -> str:
    """Return the share token for ``doc``."""

    return encode_payload(SharePayload(title=doc.title, content=flatten(doc.content)))


def encode_payload(payload: SharePayload) -> str:
    text = json.dumps(payload.as_dict(), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def decode(token: str) -> SharePayload:
    """Turn a share token (or a ``#/share/<token>`` fragment) back into a payload.

    Both the URL-safe and the standard base64 alphabets are accepted, with or
    without padding. Raises :class:`ShareDecodeError` on any malformed input.
    """

    cleaned = _strip_route(unquote(token or "").strip())
    if not cleaned:
        raise ShareDecodeError("Share token is empty")

    normalized = cleaned.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ShareDecodeError("Share token is not valid base64") from exc

    try:
        data: Any = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ShareDecodeError("Share token does not contain UTF-8 text") from exc
    except json.JSONDecodeError as exc:
        raise ShareDecodeError("Share token does not contain valid JSON") from exc
    except RecursionError as exc:
        raise ShareDecodeError("Share payload is nested too deeply") from exc

    if not isinstance(data, dict):
        raise ShareDecodeError("Share payload must be a JSON object")

    title = data.get("title")
    content = data.get("content")
    if not isinstance(title, str):
        raise ShareDecodeError("Share payload is missing 'title'")
    if not isinstance(content, str):
        raise ShareDecodeError("Share payload is missing 'content'")
    for value in (title, content):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ShareDecodeError("Share payload contains text that is not valid Unicode") from exc
    return SharePayload(title=title, content=content)


def build_link(base_url: str, token: str) -> str:
    """Append ``#/share/<token>`` to the application location ``base_url``."""

    base, _ = urldefrag(base_url)
    return f"{base}#{SHARE_ROUTE}{token}"


def extract_token(location: str) -> str | None:
    """Return the share token carried by a URL or fragment, if any."""

    if "#" in location:
        fragment = location.split("#", 1)[1]
    else:
        fragment = location
    if fragment.startswith(SHARE_ROUTE):
        return fragment[len(SHARE_ROUTE):]
    return None


def strip_fragment(url: str) -> str:
    return url.split("#", 1)[0]


def _strip_route(value: str) -> str:
    value = value.lstrip("#")
    if value.startswith(SHARE_ROUTE):
        return value[len(SHARE_ROUTE):]
    return value


__all__ = [
    "SHARE_ROUTE",
    "SharePayload",
    "VISIBLE_SEPARATOR",
    "build_link",
    "decode",
    "encode",
    "encode_payload",
    "extract_token",
    "flatten",
    "strip_fragment",
]
