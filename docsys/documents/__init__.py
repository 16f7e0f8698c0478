"""Document entity, page codec and access gate."""

from __future__ import annotations

from . import access, pages
from .access import AccessDecision, DENIED_MESSAGE
from .models import (
    AccessPolicy,
    BLANK_PAGE,
    DEFAULT_PAGE,
    DEFAULT_TITLE,
    DeterrentPassword,
    Document,
    OpenAccess,
    normalize_password,
)

__all__ = [
    "access",
    "pages",
    "AccessDecision",
    "AccessPolicy",
    "BLANK_PAGE",
    "DEFAULT_PAGE",
    "DEFAULT_TITLE",
    "DENIED_MESSAGE",
    "DeterrentPassword",
    "Document",
    "OpenAccess",
    "normalize_password",
]
