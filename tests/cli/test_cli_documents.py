from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsys.cli import main
from docsys.documents import pages
from docsys.documents.access import DENIED_MESSAGE
from docsys.editor import PASSWORD_MISMATCH
from docsys.sharing import IMPORT_FAILED_NOTICE
from tests.utils import logger_to_stderr


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "docsys.toml"
    path.write_text(
        "[storage]\ndata_dir = 'data'\n\n[share]\nbase_url = 'https://app.example/'\n",
        encoding="utf-8",
    )
    return path


def _run(config_path: Path, *args: str) -> int:
    return main(["--config", str(config_path), *args])


def _new(config_path: Path, capsys: pytest.CaptureFixture[str], *args: str) -> str:
    assert _run(config_path, "new", *args) == 0
    return capsys.readouterr().out.strip()


def _listing(config_path: Path, capsys: pytest.CaptureFixture[str]) -> list[dict[str, object]]:
    assert _run(config_path, "list", "--format", "json") == 0
    return json.loads(capsys.readouterr().out)


def test_new_and_list(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys, "--title", "Plan")

    entries = _listing(config_path, capsys)

    assert [(entry["id"], entry["title"], entry["protected"]) for entry in entries] == [(doc_id, "Plan", False)]
    assert (config_path.parent / "data" / "ai-text-editor-documents.json").exists()


def test_list_text_marks_protected(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys, "--title", "Secret")
    assert _run(config_path, "protect", doc_id, "--new-password", "abcd", "--confirm-password", "abcd") == 0
    capsys.readouterr()

    assert _run(config_path, "list") == 0

    assert "Secret [locked]" in capsys.readouterr().out


def test_write_splits_pages(config_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)
    source = tmp_path / "page.html"
    source.write_text(pages.join(["<h1>A</h1>", "<p>B</p>"]), encoding="utf-8")

    assert _run(config_path, "write", doc_id, "--file", str(source)) == 0
    assert _run(config_path, "show", doc_id, "--format", "json") == 0

    record = json.loads(capsys.readouterr().out)
    assert record["content"] == ["<h1>A</h1>", "<p>B</p>"]
    assert "password" not in record


def test_protected_document_needs_password(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)
    assert _run(config_path, "protect", doc_id, "--new-password", "abcd", "--confirm-password", "abcd") == 0

    with logger_to_stderr():
        assert _run(config_path, "show", doc_id, "--password", "abce") == 1
    assert DENIED_MESSAGE in capsys.readouterr().err

    assert _run(config_path, "show", doc_id, "--password", "abcd") == 0
    assert "Start writing..." in capsys.readouterr().out

    assert _run(config_path, "unprotect", doc_id, "--password", "abcd") == 0
    assert _run(config_path, "show", doc_id) == 0


def test_protect_rejects_mismatch(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)

    with logger_to_stderr():
        exit_code = _run(config_path, "protect", doc_id, "--new-password", "abcd", "--confirm-password", "abce")

    assert exit_code == 1
    assert PASSWORD_MISMATCH in capsys.readouterr().err


def test_share_and_import(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys, "--title", "Notes")

    assert _run(config_path, "share", doc_id) == 0
    link = capsys.readouterr().out.strip()
    assert link.startswith("https://app.example/#/share/")

    assert _run(config_path, "import", link, "--yes") == 0
    imported_id = capsys.readouterr().out.strip()

    entries = _listing(config_path, capsys)
    assert entries[0]["id"] == imported_id
    assert entries[0]["title"] == "Shared: Notes"
    assert len(entries) == 2


def test_import_accepts_bare_token(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys, "--title", "Notes")
    assert _run(config_path, "share", doc_id) == 0
    token = capsys.readouterr().out.strip().rsplit("/", 1)[-1]

    assert _run(config_path, "import", token, "--yes") == 0
    assert capsys.readouterr().out.strip()


def test_import_corrupt_link_fails(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with logger_to_stderr():
        exit_code = _run(config_path, "import", "https://app.example/#/share/@@@", "--yes")

    assert exit_code == 1
    assert IMPORT_FAILED_NOTICE in capsys.readouterr().err
    assert _listing(config_path, capsys) == []


def test_export_writes_file(config_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys, "--title", "My Plan")
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    assert _run(config_path, "export", doc_id, "txt", "--output", str(out_dir)) == 0

    assert (out_dir / "My_Plan.txt").read_text(encoding="utf-8") == "Start writing...\n"


def test_export_unknown_format_fails(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)

    assert _run(config_path, "export", doc_id, "odt") == 1


def test_delete(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)

    assert _run(config_path, "delete", doc_id, "--yes") == 0
    assert _listing(config_path, capsys) == []
    assert _run(config_path, "delete", doc_id, "--yes") == 1


def test_rename(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)

    assert _run(config_path, "rename", doc_id, "Renamed") == 0

    assert _listing(config_path, capsys)[0]["title"] == "Renamed"


def test_migrate_rewrites_legacy_records(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data_file = config_path.parent / "data" / "ai-text-editor-documents.json"
    data_file.parent.mkdir()
    legacy = [{"id": "old", "title": "Old", "content": "<p>legacy</p>", "createdAt": 1, "updatedAt": 2}]
    data_file.write_text(json.dumps(legacy), encoding="utf-8")

    assert _run(config_path, "migrate", "--dry-run") == 0
    assert json.loads(data_file.read_text(encoding="utf-8")) == legacy

    assert _run(config_path, "migrate") == 0
    assert json.loads(data_file.read_text(encoding="utf-8"))[0]["content"] == ["<p>legacy</p>"]


def test_status_reports_sections(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _new(config_path, capsys)

    with logger_to_stderr():
        assert _run(config_path, "status") == 0

    err = capsys.readouterr().err
    assert "=== Storage ===" in err
    assert "Documents: 1" in err
    assert "=== Assistant ===" in err


def test_no_command_is_a_noop(config_path: Path) -> None:
    assert _run(config_path) == 0


def test_delete_logs_once(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc_id = _new(config_path, capsys)

    with logger_to_stderr():
        assert _run(config_path, "delete", doc_id, "--yes") == 0

    assert capsys.readouterr().err.count(f"Deleted document {doc_id}") == 1
