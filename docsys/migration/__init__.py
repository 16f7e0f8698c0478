"""Schema migration helpers for persisted document collections."""

from __future__ import annotations

from .schema import MIGRATIONS, MigrationReport, MigrationStep, migrate_record, migrate_records

__all__ = [
    "MIGRATIONS",
    "MigrationReport",
    "MigrationStep",
    "migrate_record",
    "migrate_records",
]
