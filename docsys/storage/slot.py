"""Durable key-value slots backing the document store."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from loguru import logger

from docsys.errors import SlotReadError, SlotWriteError

_SAFE_KEY_RE = re.compile(r"[^A-Za-z0-9._-]")


class KeyValueSlot(Protocol):
    def read(self, key: str) -> str | None:
        """Return the stored value, ``None`` when the key has never been written."""
        ...

    def write(self, key: str, value: str) -> None:
        """Replace the stored value as a whole."""
        ...


class MemorySlot:
    """Dictionary-backed slot, mostly for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value


class FileSlot:
    """Stores each key as ``<root>/<key>.json``.

    Writes go to a temporary sibling file that is then renamed over the
    target, so readers only ever observe a complete value.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        safe = _SAFE_KEY_RE.sub("_", key)
        return self.root / f"{safe}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise SlotReadError(f"Failed to read slot {key!r} from {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.root,
                prefix=f".{path.stem}-",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except (OSError, UnicodeEncodeError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SlotWriteError(f"Failed to write slot {key!r} to {path}: {exc}") from exc
        logger.debug("Wrote {} bytes to {}", len(value), path)


__all__ = ["FileSlot", "KeyValueSlot", "MemorySlot"]
