"""Editing-surface session over a single stored document."""

from __future__ import annotations

from enum import Enum

from loguru import logger

from docsys.documents import pages
from docsys.documents.models import Document, normalize_password
from docsys.sharing import codec
from docsys.storage.store import DocumentStore

MIN_PASSWORD_LENGTH = 4
PASSWORD_MISMATCH = "Passwords do not match."
PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVED = "saved"


class EditorSession:
    """Holds the working copy of a document while it is open in the editor.

    The surface hands back raw markup with page sentinels; :meth:`flush`
    splits it into pages and routes the change through the store.
    """

    def __init__(self, store: DocumentStore, document: Document) -> None:
        self._store = store
        self._document = document
        self._dirty = False

    @classmethod
    def open(cls, store: DocumentStore, document_id: str | None = None) -> "EditorSession | None":
        """Open ``document_id``, or a freshly created document when it is ``None``.

        Returns ``None`` when the id is unknown.
        """

        if document_id is None:
            return cls(store, store.create())
        document = store.get(document_id)
        if document is None:
            logger.warning("Cannot open unknown document {}", document_id)
            return None
        return cls(store, document)

    @property
    def document(self) -> Document:
        return self._document.copy()

    @property
    def title(self) -> str:
        return self._document.title

    @property
    def pages(self) -> list[str]:
        return list(self._document.content)

    @property
    def markup(self) -> str:
        return pages.join(self._document.content)

    def set_title(self, title: str) -> None:
        if title != self._document.title:
            self._document.title = title
            self._dirty = True

    @staticmethod
    def add_page(markup: str) -> str:
        return pages.append_page(markup)

    def flush(self, markup: str | None = None, *, force: bool = False) -> SaveStatus:
        """Persist the surface markup when it differs from the stored pages."""

        unchanged = markup is None or markup == self.markup
        if unchanged and not self._dirty and not force:
            return SaveStatus.IDLE

        if markup is not None:
            self._document.content = pages.split(markup)
        if not self._store.update(self._document):
            logger.warning("Document {} is no longer stored; changes were not saved", self._document.id)
            return SaveStatus.IDLE
        self._dirty = False
        return SaveStatus.SAVED

    def set_password(self, new_password: str, confirm_password: str) -> str | None:
        """Protect the document; returns a form error message or ``None``."""

        if new_password != confirm_password:
            return PASSWORD_MISMATCH
        if len(new_password) < MIN_PASSWORD_LENGTH or normalize_password(new_password) is None:
            return PASSWORD_TOO_SHORT
        self._document.password = new_password
        self.flush(force=True)
        return None

    def remove_password(self) -> None:
        self._document.password = None
        self.flush(force=True)

    def share_link(self, base_url: str) -> str:
        return codec.build_link(base_url, codec.encode(self._document))

    def close(self, markup: str | None = None) -> SaveStatus:
        return self.flush(markup)


__all__ = [
    "EditorSession",
    "MIN_PASSWORD_LENGTH",
    "PASSWORD_MISMATCH",
    "PASSWORD_TOO_SHORT",
    "SaveStatus",
]
