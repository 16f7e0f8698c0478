"""Durable storage configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from docsys.config.base import BaseConfig

DEFAULT_STORAGE_KEY = "ai-text-editor-documents"


class StorageConfig(BaseConfig):
    """Where the document collection is persisted."""

    data_dir: Path = Field(Path("./data"), description="Directory holding the key-value slot files")
    storage_key: str = Field(
        DEFAULT_STORAGE_KEY,
        min_length=1,
        description="Namespaced key of the slot holding the document collection",
    )


__all__ = ["DEFAULT_STORAGE_KEY", "StorageConfig"]
