"""Document listing and the unlock flow in front of protected documents."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from docsys.documents import access
from docsys.documents.access import DENIED_MESSAGE
from docsys.documents.models import Document
from docsys.errors import AccessDeniedError
from docsys.storage.store import DocumentStore


@dataclass(frozen=True, slots=True)
class ListingEntry:
    """What the listing may show without unlocking a document."""

    id: str
    title: str
    created_at: int
    updated_at: int
    is_protected: bool
    page_count: int

    @classmethod
    def from_document(cls, doc: Document) -> "ListingEntry":
        return cls(
            id=doc.id,
            title=doc.title,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
            is_protected=doc.is_protected,
            page_count=len(doc.content),
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "protected": self.is_protected,
            "pages": self.page_count,
        }


def list_entries(store: DocumentStore) -> list[ListingEntry]:
    return [ListingEntry.from_document(doc) for doc in store.list_documents()]


def unlock(store: DocumentStore, doc_id: str, attempt: str | None = None) -> Document | None:
    """Release a document's content once the access gate approves.

    Returns ``None`` for unknown ids and raises :class:`AccessDeniedError`
    with a retryable message when the password attempt is wrong.
    """

    doc = store.get(doc_id)
    if doc is None:
        return None
    if not access.check(doc, attempt).granted:
        raise AccessDeniedError(DENIED_MESSAGE)
    return doc


def format_date(timestamp: int) -> str:
    """Render an epoch-millisecond timestamp as e.g. ``Jan 5, 2025``."""

    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return f"{moment:%b} {moment.day}, {moment.year}"


__all__ = ["ListingEntry", "format_date", "list_entries", "unlock"]
