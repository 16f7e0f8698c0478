"""The gate is a plaintext deterrent: these tests only check equality semantics."""

from __future__ import annotations

from docsys.documents import access
from docsys.documents.access import AccessDecision
from docsys.documents.models import Document


def test_matching_password_is_granted() -> None:
    assert access.check(Document(id="d", password="abcd"), "abcd") is AccessDecision.GRANTED


def test_wrong_password_is_denied() -> None:
    decision = access.check(Document(id="d", password="abcd"), "abce")

    assert decision is AccessDecision.DENIED
    assert not decision.granted


def test_missing_attempt_is_denied_for_protected_document() -> None:
    assert not access.check(Document(id="d", password="abcd"), None).granted


def test_unprotected_document_is_granted_for_any_attempt() -> None:
    doc = Document(id="d")

    assert access.check(doc, None).granted
    assert access.check(doc, "anything").granted


def test_comparison_is_exact() -> None:
    doc = Document(id="d", password="abcd")

    assert not access.check(doc, "ABCD").granted
    assert not access.check(doc, "abcd ").granted
