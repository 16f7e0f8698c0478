"""Durable slots and the document store."""

from __future__ import annotations

from .slot import FileSlot, KeyValueSlot, MemorySlot
from .store import DEFAULT_IMPORT_PREFIX, DocumentStore

__all__ = [
    "DEFAULT_IMPORT_PREFIX",
    "DocumentStore",
    "FileSlot",
    "KeyValueSlot",
    "MemorySlot",
]
