"""Tagged migrations from legacy persisted record shapes to the current one."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from docsys.documents.models import BLANK_PAGE

Record = dict[str, Any]


@dataclass(frozen=True, slots=True)
class MigrationStep:
    """One structural upgrade applied to a single persisted record."""

    tag: str
    description: str
    detect: Callable[[Mapping[str, Any]], bool]
    upgrade: Callable[[Mapping[str, Any]], Record]


@dataclass(slots=True)
class MigrationReport:
    """Counts of records touched by each migration step."""

    total: int = 0
    applied: Counter[str] = field(default_factory=Counter)

    @property
    def changed(self) -> bool:
        return sum(self.applied.values()) > 0

    def as_dict(self) -> dict[str, Any]:
        return {"total": self.total, "applied": dict(self.applied)}


def _content_is_single_string(record: Mapping[str, Any]) -> bool:
    return isinstance(record.get("content"), str)


def _wrap_content_in_pages(record: Mapping[str, Any]) -> Record:
    return {**record, "content": [record["content"] or BLANK_PAGE]}


MIGRATIONS: tuple[MigrationStep, ...] = (
    MigrationStep(
        tag="content-as-pages",
        description="Single markup string becomes a one-page sequence",
        detect=_content_is_single_string,
        upgrade=_wrap_content_in_pages,
    ),
)


def migrate_record(record: Any, steps: Iterable[MigrationStep] = MIGRATIONS) -> tuple[Any, list[str]]:
    """Upgrade one record, returning it with the tags of the steps applied.

    Non-object records are returned untouched; rejecting them is up to the
    caller. Records already in the current shape pass through unchanged.
    """

    if not isinstance(record, Mapping):
        return record, []

    current: Record = dict(record)
    applied: list[str] = []
    for step in steps:
        if step.detect(current):
            current = step.upgrade(current)
            applied.append(step.tag)
    return current, applied


def migrate_records(records: Iterable[Any], steps: Iterable[MigrationStep] = MIGRATIONS) -> tuple[list[Any], MigrationReport]:
    steps = tuple(steps)
    report = MigrationReport()
    migrated: list[Any] = []
    for record in records:
        upgraded, applied = migrate_record(record, steps)
        report.total += 1
        report.applied.update(applied)
        migrated.append(upgraded)

    if report.changed:
        logger.info("Migrated legacy document records: {}", dict(report.applied))
    return migrated, report


__all__ = [
    "MIGRATIONS",
    "MigrationReport",
    "MigrationStep",
    "migrate_record",
    "migrate_records",
]
