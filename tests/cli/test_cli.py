"""Tests for the formcanvas CLI commands."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]


def _run(
    storage_dir: Path, *args: str, extra_env: dict[str, str] | None = None
) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["FORMCANVAS_STORAGE_DIR"] = str(storage_dir)
    env.pop("FORMCANVAS_STORAGE_KEY", None)
    env.update(extra_env or {})
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=REPO_ROOT,
        env=env,
        timeout=60,
    )


def _stored(storage_dir: Path) -> dict:
    result = _run(storage_dir, "show", "--json")
    assert result.returncode == 0, result.stderr
    return json.loads(result.stdout)


@pytest.fixture
def store(tmp_path):
    """Storage directory holding a freshly initialised form."""
    result = _run(tmp_path, "init", "--name", "Intake")
    assert result.returncode == 0, result.stderr
    return tmp_path


def test_no_command_prints_help(tmp_path):
    result = _run(tmp_path)
    assert result.returncode == 1
    assert "usage:" in result.stdout


def test_init_writes_default_form(store):
    data = _stored(store)
    assert data["name"] == "Intake"
    assert len(data["sections"]) == 1
    assert data["sections"][0]["title"] == "Section 1"
    assert (store / "form-builder-schema.json").exists()


def test_init_refuses_to_overwrite(store):
    result = _run(store, "init")
    assert result.returncode == 1
    forced = _run(store, "init", "--force")
    assert forced.returncode == 0


def test_add_section_and_field(store):
    assert _run(store, "add-section", "Contact").returncode == 0
    data = _stored(store)
    assert [s["title"] for s in data["sections"]] == ["Section 1", "Contact"]

    column_id = data["sections"][0]["rows"][0]["columns"][0]["id"]
    result = _run(store, "add-field", "date", "--column", column_id, "--label", "DOB")
    assert result.returncode == 0, result.stderr
    assert "DOB [date, field_1" in result.stdout

    fields = _stored(store)["sections"][0]["rows"][0]["columns"][0]["fields"]
    assert fields == [
        {"id": fields[0]["id"], "type": "date", "name": "field_1", "label": "DOB"}
    ]


def test_add_field_uses_selection(store):
    data = _stored(store)
    section_id = data["sections"][0]["id"]
    result = _run(store, "add-field", "text", "--select", f"section:{section_id}")
    assert result.returncode == 0, result.stderr
    column = _stored(store)["sections"][0]["rows"][0]["columns"][0]
    assert [f["type"] for f in column["fields"]] == ["text"]


def test_add_row_with_layout(store):
    section_id = _stored(store)["sections"][0]["id"]
    result = _run(store, "add-row", "--section", section_id, "--layout", "2,2")
    assert result.returncode == 0, result.stderr
    rows = _stored(store)["sections"][0]["rows"]
    assert [c["span"] for c in rows[1]["columns"]] == [2, 2]


def test_add_row_rejects_bad_layout(store):
    section_id = _stored(store)["sections"][0]["id"]
    result = _run(store, "add-row", "--section", section_id, "--layout", "3,3")
    assert result.returncode == 1


def test_targets_reports_defaults(store):
    data = _stored(store)
    section = data["sections"][0]
    result = _run(store, "targets")
    assert result.returncode == 0
    assert f"section: {section['id']}" in result.stdout
    assert f"column: {section['rows'][0]['columns'][0]['id']}" in result.stdout


def test_remove_detects_kind(store):
    _run(store, "add-section", "Extra")
    extra_id = _stored(store)["sections"][1]["id"]
    assert _run(store, "remove", extra_id).returncode == 0
    assert len(_stored(store)["sections"]) == 1


def test_remove_unknown_id_fails(store):
    assert _run(store, "remove", "missing").returncode == 1


def test_reorder_rows(store):
    section_id = _stored(store)["sections"][0]["id"]
    _run(store, "add-row", "--section", section_id)
    before = [r["id"] for r in _stored(store)["sections"][0]["rows"]]
    assert _run(store, "reorder-rows", section_id, "1", "0").returncode == 0
    after = [r["id"] for r in _stored(store)["sections"][0]["rows"]]
    assert after == list(reversed(before))


def test_rename_and_clear_description(store):
    _run(store, "rename", "--name", "Survey", "--description", "Annual")
    data = _stored(store)
    assert (data["name"], data["description"]) == ("Survey", "Annual")
    _run(store, "rename", "--description", "")
    assert _stored(store)["description"] is None


def test_validate_reports_valid(store):
    result = _run(store, "validate")
    assert result.returncode == 0
    assert "Schema is valid" in result.stdout


def test_corrupt_store_is_an_error(tmp_path):
    (tmp_path / "form-builder-schema.json").write_text("{not json", encoding="utf-8")
    result = _run(tmp_path, "show")
    assert result.returncode == 1
    assert "Cannot load stored schema" in result.stderr


def test_json_schema_command(tmp_path):
    result = _run(tmp_path, "json-schema")
    assert result.returncode == 0
    assert json.loads(result.stdout)["title"] == "FormSchema"


def test_fixed_id_prefix_keeps_ids_unique(tmp_path):
    """Each command runs in a new process; a fixed prefix must not repeat ids."""
    prefix = {"FORMCANVAS_ID_PREFIX": "p"}
    for args in (["init"], ["add-section", "A"], ["add-section", "B"]):
        result = _run(tmp_path, *args, extra_env=prefix)
        assert result.returncode == 0, result.stderr

    validate = _run(tmp_path, "validate", extra_env=prefix)
    assert validate.returncode == 0, validate.stdout
    titles = [s["title"] for s in _stored(tmp_path)["sections"]]
    assert titles == ["Section 1", "A", "B"]


def test_unknown_selection_kind_is_rejected(store):
    result = _run(store, "targets", "--select", "page:x")
    assert result.returncode == 2
    assert "Unknown node kind 'page'" in result.stderr
