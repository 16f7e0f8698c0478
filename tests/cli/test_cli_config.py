from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsys.cli import main
from tests.utils import logger_to_stderr


def test_config_check_ok(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "docsys.toml"
    path.write_text("[storage]\ndata_dir = 'data'\n", encoding="utf-8")

    with logger_to_stderr():
        exit_code = main(["--config", str(path), "config", "check"])

    assert exit_code == 0
    err = capsys.readouterr().err
    assert "Configuration OK" in err
    assert "[assistant]" in err


def test_config_check_json_reports_validation_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "docsys.toml"
    path.write_text("[share]\nprefix = 'x'\n", encoding="utf-8")

    exit_code = main(["--config", str(path), "config", "check", "--format", "json"])

    assert exit_code == 3
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "error"
    assert payload["error"]["details"][0]["loc"] == "share.prefix"


def test_config_check_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with logger_to_stderr():
        exit_code = main(["--config", str(tmp_path / "absent.toml"), "config", "check"])

    assert exit_code == 2
    assert "missing_file" in capsys.readouterr().err


def test_config_explain_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["config", "explain", "--format", "json"]) == 0

    fields = {field["name"] for field in json.loads(capsys.readouterr().out)["fields"]}
    assert "storage.storage_key" in fields


def test_config_explain_text(capsys: pytest.CaptureFixture[str]) -> None:
    with logger_to_stderr():
        assert main(["config", "explain"]) == 0

    assert "share.title_prefix" in capsys.readouterr().err
