"""Tests for the tasksmd-group command line."""

import json
from pathlib import Path

import pytest

from tasksmd_group.cli import main

WORK_NOTE = """\
# Sprint

- [ ] Ship release 📅 2023-01-05
- [x] Review PR #review
"""

HOME_NOTE = """\
## Garden

- [ ] Water the plants #home
"""


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    (tmp_path / "work").mkdir()
    (tmp_path / "home").mkdir()
    (tmp_path / "work" / "sprint.md").write_text(WORK_NOTE, encoding="utf-8")
    (tmp_path / "home" / "garden.md").write_text(HOME_NOTE, encoding="utf-8")
    (tmp_path / "README.txt").write_text("- [ ] not a note\n", encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("TASKSMD_GROUP_BY", raising=False)
    monkeypatch.delenv("TASKSMD_VAULT_ROOT", raising=False)


def test_group_by_folder_and_status(vault: Path, capsys):
    rc = main([str(vault), "--group-by", "folder", "--group-by", "status"])
    assert rc == 0
    out = capsys.readouterr().out
    assert out == (
        "#### home/\n\n"
        "##### Todo\n\n"
        "- [ ] Water the plants #home\n\n"
        "#### work/\n\n"
        "##### Todo\n\n"
        "- [ ] Ship release 📅 2023-01-05\n\n"
        "##### Done\n\n"
        "- [x] Review PR #review\n\n"
        "3 tasks\n"
    )


def test_group_by_from_environment(vault: Path, capsys, monkeypatch):
    monkeypatch.setenv("TASKSMD_GROUP_BY", "tags")
    rc = main([str(vault)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "#### #home\n" in out
    assert "#### (No tags)\n" in out
    assert "#### #review\n" in out


def test_query_file(vault: Path, tmp_path: Path, capsys):
    query = tmp_path / "query.txt"
    query.write_text("not done\ngroup by due\n", encoding="utf-8")
    rc = main([str(vault / "work" / "sprint.md"), "--query", str(query)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "#### 2023-01-05 Thursday\n" in out
    assert "#### No due date\n" in out


def test_output_json(vault: Path, tmp_path: Path):
    out_file = tmp_path / "groups.json"
    rc = main([str(vault), "--group-by", "heading", "--output-json", str(out_file)])
    assert rc == 0
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert data["groupings"] == ["heading"]
    assert [g["names"] for g in data["groups"]] == [["Garden"], ["Sprint"]]
    assert data["groups"][1]["tasks"][0]["path"] == "work/sprint.md"


def test_unknown_property_fails(vault: Path, caplog):
    rc = main([str(vault), "--group-by", "colour"])
    assert rc == 1
    assert "Unknown grouping property" in caplog.text


def test_missing_path_fails(tmp_path: Path, caplog):
    rc = main([str(tmp_path / "nope.md")])
    assert rc == 1
    assert "Path not found" in caplog.text


def test_note_outside_root_fails(vault: Path, caplog):
    rc = main([str(vault / "work"), "--root", str(vault / "home")])
    assert rc == 1
    assert "is not inside the vault folder" in caplog.text


def test_folder_named_like_a_note_is_skipped(vault: Path, capsys):
    (vault / "archive.md").mkdir()
    rc = main([str(vault), "--group-by", "folder"])
    assert rc == 0
    assert capsys.readouterr().out.endswith("3 tasks\n")


def test_note_that_is_not_utf8_fails(vault: Path, caplog):
    (vault / "work" / "b.md").write_bytes(b"- [ ] caf\xe9\n")
    rc = main([str(vault)])
    assert rc == 1
    assert "Could not read" in caplog.text
    assert "b.md" in caplog.text
