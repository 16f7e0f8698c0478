from __future__ import annotations

from docsys.documents.models import BLANK_PAGE
from docsys.migration import MIGRATIONS, migrate_record, migrate_records


def test_legacy_string_content_becomes_single_page() -> None:
    record, applied = migrate_record({"id": "a", "content": "<p>x</p>"})

    assert record["content"] == ["<p>x</p>"]
    assert applied == ["content-as-pages"]


def test_empty_legacy_content_becomes_blank_page() -> None:
    record, _ = migrate_record({"id": "a", "content": ""})

    assert record["content"] == [BLANK_PAGE]


def test_migration_is_idempotent() -> None:
    once, _ = migrate_record({"id": "a", "content": "<p>x</p>"})
    twice, applied = migrate_record(once)

    assert twice == once
    assert applied == []


def test_current_shape_passes_through_unchanged() -> None:
    record = {"id": "a", "content": ["<p>1</p>", "<p>2</p>"], "password": "abcd"}

    migrated, applied = migrate_record(record)

    assert migrated == record
    assert applied == []


def test_input_record_is_not_mutated() -> None:
    original = {"id": "a", "content": "x"}

    migrate_record(original)

    assert original["content"] == "x"


def test_non_object_records_are_left_for_the_caller() -> None:
    migrated, report = migrate_records(["junk", {"id": "a", "content": "x"}])

    assert migrated[0] == "junk"
    assert report.total == 2
    assert report.as_dict() == {"total": 2, "applied": {"content-as-pages": 1}}


def test_every_step_has_a_unique_tag() -> None:
    tags = [step.tag for step in MIGRATIONS]

    assert len(tags) == len(set(tags))
