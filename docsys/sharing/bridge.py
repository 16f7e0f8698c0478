"""Importing shared documents into the store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from loguru import logger

from docsys.documents.models import Document
from docsys.errors import ShareDecodeError
from docsys.storage.store import DocumentStore

from . import codec
from .codec import SharePayload

IMPORT_FAILED_NOTICE = "Could not import the shared document. The link may be corrupted."


class ImportBridge:
    """Turns decoded share payloads into brand-new stored documents."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def import_payload(self, payload: SharePayload) -> Document:
        return self._store.import_shared(payload)

    def import_token(self, token: str) -> Document:
        """Decode ``token`` and import it; raises :class:`ShareDecodeError` when malformed."""

        return self.import_payload(codec.decode(token))


class LocationBar(Protocol):
    def replace(self, url: str) -> None:
        """Replace the visible location without adding a history entry."""
        ...


class ShareImportStatus(str, Enum):
    NO_SHARE = "no_share"
    IMPORTED = "imported"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass(slots=True)
class ShareImportOutcome:
    status: ShareImportStatus
    document: Document | None = None
    notice: str | None = None
    location: str | None = None


class ShareLinkHandler:
    """Consumes a ``#/share/<token>`` location once at application start."""

    def __init__(
        self,
        store: DocumentStore,
        location_bar: LocationBar,
        *,
        confirm: Callable[[SharePayload], bool] | None = None,
    ) -> None:
        self._bridge = ImportBridge(store)
        self._location_bar = location_bar
        self._confirm = confirm or (lambda payload: True)

    def handle(self, url: str) -> ShareImportOutcome:
        token = codec.extract_token(url)
        if token is None:
            return ShareImportOutcome(ShareImportStatus.NO_SHARE, location=url)

        cleaned = codec.strip_fragment(url)
        try:
            payload = codec.decode(token)
            if not self._confirm(payload):
                logger.info("Import of shared document {!r} declined", payload.title)
                return ShareImportOutcome(ShareImportStatus.DECLINED, location=cleaned)
            document = self._bridge.import_payload(payload)
            return ShareImportOutcome(ShareImportStatus.IMPORTED, document=document, location=cleaned)
        except ShareDecodeError as exc:
            logger.error("Failed to parse shared document data from URL: {}", exc)
            return ShareImportOutcome(ShareImportStatus.FAILED, notice=IMPORT_FAILED_NOTICE, location=cleaned)
        finally:
            self._location_bar.replace(cleaned)


__all__ = [
    "IMPORT_FAILED_NOTICE",
    "ImportBridge",
    "LocationBar",
    "ShareImportOutcome",
    "ShareImportStatus",
    "ShareLinkHandler",
]
