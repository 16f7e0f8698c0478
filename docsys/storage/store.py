"""Document collection persisted as one snapshot in a key-value slot."""

from __future__ import annotations

import json
import time
import uuid
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from loguru import logger

from docsys.config.storage import DEFAULT_STORAGE_KEY, StorageConfig
from docsys.documents.models import DEFAULT_PAGE, DEFAULT_TITLE, Document
from docsys.errors import DuplicateDocumentError, StorageError
from docsys.migration import MigrationReport, migrate_records

from .slot import FileSlot, KeyValueSlot

if TYPE_CHECKING:
    from docsys.sharing.codec import SharePayload

DEFAULT_IMPORT_PREFIX = "Shared: "


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class DocumentStore:
    """Sole owner of the document collection and of its durable slot.

    Documents handed out by the store are copies; changes only take effect
    when routed back through :meth:`update`. Every mutation rewrites the whole
    collection to the slot before returning.
    """

    def __init__(
        self,
        slot: KeyValueSlot,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], int] = _epoch_millis,
        id_factory: Callable[[], str] | None = None,
        import_title_prefix: str = DEFAULT_IMPORT_PREFIX,
    ) -> None:
        self._slot = slot
        self.key = key
        self._clock = clock
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.import_title_prefix = import_title_prefix
        self._documents: dict[str, Document] = {}
        self._last_tick = 0
        self.last_migration = MigrationReport()
        self.last_persist_ok = True

    @classmethod
    def from_config(cls, config: StorageConfig, **kwargs: Any) -> "DocumentStore":
        """Create a file-backed store for ``config`` and load it."""

        store = cls(FileSlot(config.data_dir), key=config.storage_key, **kwargs)
        store.load()
        return store

    # ------------------------------------------------------------------
    # Reads
    def load(self) -> int:
        """Replace the in-memory collection with the slot's content.

        Missing data yields an empty collection. Unreadable or corrupt data is
        logged and also yields an empty collection. Returns the number of
        documents loaded.
        """

        self._documents = {}
        self.last_migration = MigrationReport()

        try:
            raw = self._slot.read(self.key)
        except StorageError:
            logger.exception("Error loading documents from storage slot {}", self.key)
            return 0
        if raw is None:
            logger.debug("Storage slot {} is empty", self.key)
            return 0

        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise ValueError(f"expected a JSON array, got {type(records).__name__}")
            records, report = migrate_records(records)
            documents = [Document.from_record(record) for record in records]
        except (ValueError, OverflowError, RecursionError):
            logger.exception("Error decoding documents from storage slot {}", self.key)
            return 0

        for doc in documents:
            if doc.id in self._documents:
                logger.warning("Ignoring duplicate document id {} in storage slot {}", doc.id, self.key)
                continue
            self._documents[doc.id] = doc
            self._last_tick = max(self._last_tick, doc.created_at, doc.updated_at)

        self.last_migration = report
        logger.debug("Loaded {} documents from storage slot {}", len(self._documents), self.key)
        return len(self._documents)

    def get(self, doc_id: str) -> Document | None:
        doc = self._documents.get(doc_id)
        return doc.copy() if doc is not None else None

    def list_documents(self) -> list[Document]:
        """Return copies ordered most recently updated first."""

        return sorted((doc.copy() for doc in self._documents.values()), key=lambda d: d.updated_at, reverse=True)

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter([doc.copy() for doc in self._documents.values()])

    # ------------------------------------------------------------------
    # Mutations
    def create(self) -> Document:
        now = self._tick()
        doc = Document(
            id=self._allocate_id(),
            title=DEFAULT_TITLE,
            content=[DEFAULT_PAGE],
            created_at=now,
            updated_at=now,
        )
        self._documents[doc.id] = doc
        self.save()
        logger.info("Created document {}", doc.id)
        return doc.copy()

    def import_shared(self, payload: "SharePayload") -> Document:
        """Insert a new document built from a decoded share payload.

        The document goes to the front of the collection and never replaces an
        existing one.
        """

        now = self._tick()
        doc = Document(
            id=self._allocate_id(),
            title=f"{self.import_title_prefix}{payload.title}",
            content=[payload.content],
            created_at=now,
            updated_at=now,
        )
        self._documents = {doc.id: doc, **self._documents}
        self.save()
        logger.info("Imported shared document {} as {}", payload.title, doc.id)
        return doc.copy()

    def update(self, doc: Document) -> bool:
        """Replace the stored document with the same id.

        Unknown ids are ignored and ``False`` is returned. On success the
        caller's ``updated_at`` is refreshed to match the stored copy.
        """

        current = self._documents.get(doc.id)
        if current is None:
            logger.debug("Ignoring update for unknown document {}", doc.id)
            return False

        doc.updated_at = self._tick(after=max(current.updated_at, doc.updated_at))
        stored = doc.copy()
        stored.created_at = current.created_at
        self._documents[doc.id] = stored
        self.save()
        return True

    def delete(self, doc_id: str) -> bool:
        removed = self._documents.pop(doc_id, None) is not None
        self.save()
        if removed:
            logger.info("Deleted document {}", doc_id)
        return removed

    def save(self) -> bool:
        """Write the full collection snapshot to the slot.

        Failures are logged and reported through the return value and
        :attr:`last_persist_ok`; the in-memory collection stays authoritative.
        """

        try:
            payload = json.dumps([doc.to_record() for doc in self._documents.values()], ensure_ascii=False)
            self._slot.write(self.key, payload)
        except (StorageError, OSError, ValueError):
            logger.exception("Error saving documents to storage slot {}", self.key)
            self.last_persist_ok = False
            return False
        self.last_persist_ok = True
        return True

    # ------------------------------------------------------------------
    def _tick(self, *, after: int | None = None) -> int:
        floor = self._last_tick if after is None else max(self._last_tick, after + 1)
        now = max(self._clock(), floor)
        self._last_tick = now
        return now

    def _allocate_id(self) -> str:
        doc_id = self._id_factory()
        if doc_id in self._documents:
            raise DuplicateDocumentError(f"Document id {doc_id} is already in use")
        return doc_id


__all__ = ["DEFAULT_IMPORT_PREFIX", "DocumentStore"]
