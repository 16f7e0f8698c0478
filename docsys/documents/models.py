"""Document entity and its access policy."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

DEFAULT_TITLE = "Untitled Document"
DEFAULT_PAGE = "<h1>Start writing...</h1><p><br></p>"
BLANK_PAGE = "<p><br></p>"


@dataclass(frozen=True, slots=True)
class OpenAccess:
    """The document can be opened by anyone with access to the store."""


@dataclass(frozen=True, slots=True)
class DeterrentPassword:
    """Plaintext password that discourages casual viewing.

    This is not a security boundary: the secret is stored and compared as
    plain text and anyone who can read the durable slot can read it.
    """

    secret: str = field(repr=False)


AccessPolicy = Union[OpenAccess, DeterrentPassword]


def normalize_password(value: str | None) -> str | None:
    """Map empty or whitespace-only passwords to ``None`` (unprotected)."""

    if value is None or not value.strip():
        return None
    return value


@dataclass(slots=True)
class Document:
    """A titled sequence of opaque markup pages."""

    id: str
    title: str = DEFAULT_TITLE
    content: list[str] = field(default_factory=lambda: [DEFAULT_PAGE])
    created_at: int = 0
    updated_at: int = 0
    password: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.content = list(self.content)
        self.password = normalize_password(self.password)

    @property
    def access_policy(self) -> AccessPolicy:
        if self.password is None:
            return OpenAccess()
        return DeterrentPassword(self.password)

    @property
    def is_protected(self) -> bool:
        return self.password is not None

    def copy(self) -> "Document":
        return Document(
            id=self.id,
            title=self.title,
            content=list(self.content),
            created_at=self.created_at,
            updated_at=self.updated_at,
            password=self.password,
        )

    def to_record(self) -> dict[str, Any]:
        """Return the persisted JSON shape of this document."""

        record: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "content": list(self.content),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.password is not None:
            record["password"] = self.password
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Document":
        """Build a document from a current-shape record.

        Raises ``ValueError`` when the record does not have the expected shape;
        legacy records must be migrated before reaching this point.
        """

        if not isinstance(record, Mapping):
            raise ValueError(f"Document record must be an object, got {type(record).__name__}")

        doc_id = record.get("id")
        if not isinstance(doc_id, str) or not doc_id:
            raise ValueError("Document record is missing a string 'id'")

        title = record.get("title", DEFAULT_TITLE)
        if not isinstance(title, str):
            raise ValueError(f"Document {doc_id} has a non-string title")

        content = record.get("content")
        if not isinstance(content, list) or not all(isinstance(page, str) for page in content):
            raise ValueError(f"Document {doc_id} content must be a list of strings")

        password = record.get("password")
        if password is not None and not isinstance(password, str):
            raise ValueError(f"Document {doc_id} has a non-string password")

        return cls(
            id=doc_id,
            title=title,
            content=content,
            created_at=_timestamp(record.get("createdAt", 0), doc_id, "createdAt"),
            updated_at=_timestamp(record.get("updatedAt", 0), doc_id, "updatedAt"),
            password=password,
        )


def _timestamp(value: Any, doc_id: str, name: str) -> int:
    invalid = isinstance(value, bool) or not isinstance(value, (int, float))
    if invalid or (isinstance(value, float) and not math.isfinite(value)):
        raise ValueError(f"Document {doc_id} has an invalid {name}: {value!r}")
    return int(value)


__all__ = [
    "AccessPolicy",
    "BLANK_PAGE",
    "DEFAULT_PAGE",
    "DEFAULT_TITLE",
    "DeterrentPassword",
    "Document",
    "OpenAccess",
    "normalize_password",
]
