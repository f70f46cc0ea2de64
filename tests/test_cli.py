from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from lrc_editor.cli import app

runner = CliRunner()

SAMPLE = "[ar:Someone]\n[00:10.00][00:40.00]Chorus\n[00:20.00]Verse\n"


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    for var in ("LRC_EDITOR_NUDGE_STEP", "LRC_EDITOR_EXPORT_FORMAT", "LRC_EDITOR_SRT_LAST_LINE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def lrc_file(tmp_path):
    p = tmp_path / "song.lrc"
    p.write_text(SAMPLE, encoding="utf-8")
    return p


def test_parse_stats(lrc_file):
    res = runner.invoke(app, ["parse", str(lrc_file)])
    assert res.exit_code == 0
    assert "events_total=3" in res.output
    assert "lines_metadata=1" in res.output


def test_rejects_non_lrc(tmp_path):
    p = tmp_path / "song.txt"
    p.write_text(SAMPLE, encoding="utf-8")
    res = runner.invoke(app, ["export", str(p)])
    assert res.exit_code == 1


def test_export_lrc_collapses_repeats(lrc_file):
    res = runner.invoke(app, ["export", str(lrc_file), "--format", "lrc"])
    assert res.exit_code == 0
    assert res.output == "[00:40.00]Chorus\n[00:20.00]Verse\n"


def test_export_json_to_file(lrc_file, tmp_path):
    out = tmp_path / "out.json"
    res = runner.invoke(app, ["export", str(lrc_file), "--format", "json", "--out", str(out)])
    assert res.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["metadata"] == {"ar": "Someone"}
    assert [ln["text"] for ln in data["lines"]] == ["Verse", "Chorus"]


def test_shift(lrc_file):
    res = runner.invoke(app, ["shift", str(lrc_file), "--delay", "-15"])
    assert res.exit_code == 0
    assert res.output == "[00:25.00]Chorus\n[00:05.00]Verse\n"


def test_nudge_backward(lrc_file):
    res = runner.invoke(app, ["nudge", str(lrc_file), "--steps", "-2"])
    assert res.exit_code == 0
    assert res.output == "[00:39.80]Chorus\n[00:19.80]Verse\n"


def test_stamp(tmp_path):
    p = tmp_path / "lyrics.txt"
    p.write_text("one\n\n two\n", encoding="utf-8")
    res = runner.invoke(app, ["stamp", str(p), "1.5", "3"])
    assert res.exit_code == 0
    assert res.output == "[00:01.50]one\n[00:03.00]two\n"


def test_active(lrc_file):
    res = runner.invoke(app, ["active", str(lrc_file), "--at", "5", "--at", "12", "--at", "15", "--at", "25", "--at", "41"])
    assert res.exit_code == 0
    assert res.output.splitlines() == ["12\t0\tChorus", "25\t1\tVerse", "41\t0\tChorus"]


def test_export_lrc_with_tags(lrc_file):
    res = runner.invoke(app, ["export", str(lrc_file), "--format", "lrc", "--tags"])
    assert res.exit_code == 0
    assert res.output == "[ar:Someone]\n[00:20.00]Verse\n[00:40.00]Chorus\n"


def test_parse_rejects_non_utf8(tmp_path):
    p = tmp_path / "latin1.lrc"
    p.write_bytes(b"[00:01.00]caf\xe9\n")
    res = runner.invoke(app, ["parse", str(p)])
    assert res.exit_code == 1
    assert not isinstance(res.exception, UnicodeDecodeError)


def test_config_saves_and_is_used(lrc_file):
    res = runner.invoke(app, ["config", "--nudge-step", "0.5", "--export-format", "JSON"])
    assert res.exit_code == 0
    assert "nudge_step_s=0.5" in res.output
    assert "export_format=json" in res.output

    res = runner.invoke(app, ["nudge", str(lrc_file)])
    assert res.output == "[00:40.50]Chorus\n[00:20.50]Verse\n"

    res = runner.invoke(app, ["export", str(lrc_file)])
    assert json.loads(res.output)["metadata"] == {"ar": "Someone"}


def test_config_rejects_unknown_format():
    res = runner.invoke(app, ["config", "--export-format", "docx"])
    assert res.exit_code != 0
