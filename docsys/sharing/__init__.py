"""Share-link encoding and import."""

from __future__ import annotations

from . import codec
from .bridge import (
    IMPORT_FAILED_NOTICE,
    ImportBridge,
    LocationBar,
    ShareImportOutcome,
    ShareImportStatus,
    ShareLinkHandler,
)
from .codec import SharePayload, VISIBLE_SEPARATOR

__all__ = [
    "codec",
    "IMPORT_FAILED_NOTICE",
    "ImportBridge",
    "LocationBar",
    "ShareImportOutcome",
    "ShareImportStatus",
    "ShareLinkHandler",
    "SharePayload",
    "VISIBLE_SEPARATOR",
]
