"""Deterrent password gate.

The gate compares a caller-supplied attempt with the document's stored
plaintext password. It has no hashing, no rate limiting and no lockout; it
keeps casual viewers out of a document and nothing more.
"""

from __future__ import annotations

from enum import Enum

from loguru import logger

from .models import DeterrentPassword, Document

DENIED_MESSAGE = "Incorrect password. Please try again."


class AccessDecision(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"

    @property
    def granted(self) -> bool:
        return self is AccessDecision.GRANTED


def check(doc: Document, attempt: str | None) -> AccessDecision:
    """Return whether ``attempt`` unlocks ``doc``."""

    policy = doc.access_policy
    if not isinstance(policy, DeterrentPassword):
        return AccessDecision.GRANTED
    if attempt is not None and attempt == policy.secret:
        return AccessDecision.GRANTED
    logger.debug("Password attempt rejected for document {}", doc.id)
    return AccessDecision.DENIED


__all__ = ["AccessDecision", "DENIED_MESSAGE", "check"]
