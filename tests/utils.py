"""Helpers shared by several test packages."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Any

from loguru import logger

from docsys.storage import MemorySlot
from docsys.storage.store import DocumentStore


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def stored_records(slot: MemorySlot, key: str = "ai-text-editor-documents") -> list[dict[str, Any]]:
    raw = slot.read(key)
    return json.loads(raw) if raw is not None else []


def reload(slot: MemorySlot, **kwargs: Any) -> DocumentStore:
    fresh = DocumentStore(slot, **kwargs)
    fresh.load()
    return fresh


class FrozenClock:
    """Clock that only moves when told to, so tests control timestamps."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int = 1) -> None:
        self.now += millis
