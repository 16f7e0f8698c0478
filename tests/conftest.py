"""Shared fixtures for the docsys test-suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from docsys.storage import DocumentStore, MemorySlot  # noqa: E402
from tests.utils import FrozenClock  # noqa: E402


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def slot() -> MemorySlot:
    return MemorySlot()


@pytest.fixture()
def store(slot: MemorySlot, clock: FrozenClock) -> DocumentStore:
    document_store = DocumentStore(slot, clock=clock)
    document_store.load()
    return document_store
