"""Exception hierarchy shared across docsys modules."""

from __future__ import annotations


class DocsysError(RuntimeError):
    """Base class for errors raised by docsys."""


class StorageError(DocsysError):
    """Raised when the durable slot cannot be accessed."""


class SlotReadError(StorageError):
    """Raised when a slot value cannot be read."""


class SlotWriteError(StorageError):
    """Raised when a slot value cannot be written."""


class DuplicateDocumentError(DocsysError):
    """Raised when a freshly allocated document id is already in use."""


class ShareDecodeError(DocsysError, ValueError):
    """Raised when a share token cannot be turned back into a payload."""


class AccessDeniedError(DocsysError):
    """Raised when a protected document is requested without its password."""


class AssistantError(DocsysError):
    """Raised when the writing assistant cannot produce a reply."""


class ExportError(DocsysError):
    """Raised when a document cannot be rendered into an export format."""


__all__ = [
    "DocsysError",
    "StorageError",
    "SlotReadError",
    "SlotWriteError",
    "DuplicateDocumentError",
    "ShareDecodeError",
    "AccessDeniedError",
    "AssistantError",
    "ExportError",
]
