"""
Tests for the filespine CLI.
"""

from __future__ import annotations

import json
import os

import pytest
from typer.testing import CliRunner

from filespine import __version__
from filespine.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    """Run every command inside an empty directory with no FILESPINE_* env."""
    for key in list(os.environ):
        if key.startswith("FILESPINE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestRootApp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "read" in result.output
        assert "write" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"file-spine {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)


class TestRead:
    def test_reads_multiple_formats(self, workdir):
        (workdir / "a.txt").write_text("hello", encoding="utf-8")
        (workdir / "b.json").write_text('{"k": 1}', encoding="utf-8")
        (workdir / "c.bin").write_bytes(b"\x00\x01\x02")

        result = runner.invoke(app, ["read", "a.txt", "b.json", "c.bin", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["a.txt"] == {"ok": True, "value": "hello"}
        assert payload["b.json"] == {"ok": True, "value": {"k": 1}}
        assert payload["c.bin"] == {"ok": True, "value": None, "size": 3}

    def test_table_output(self, workdir):
        (workdir / "a.txt").write_text("hello", encoding="utf-8")
        result = runner.invoke(app, ["read", "a.txt"])
        assert result.exit_code == 0
        assert "a.txt" in result.output
        assert "ok" in result.output

    def test_partial_failure_reports_and_exits_nonzero(self, workdir):
        (workdir / "a.txt").write_text("hello", encoding="utf-8")
        (workdir / "b.json").write_text("{broken", encoding="utf-8")

        result = runner.invoke(app, ["read", "a.txt", "b.json", "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["a.txt"]["ok"] is True
        assert payload["b.json"]["ok"] is False
        assert payload["b.json"]["error"]["error_type"] == "DecodeError"

    def test_strict_fails_whole_batch(self, workdir):
        (workdir / "a.txt").write_text("hello", encoding="utf-8")

        result = runner.invoke(app, ["read", "a.txt", "missing.txt", "--strict"])

        assert result.exit_code == 1
        assert "missing.txt" in result.output
        assert "Error" in result.output

    def test_read_as_bytes(self, workdir):
        (workdir / "a.bin").write_bytes(b"abc")
        result = runner.invoke(app, ["read", "a.bin", "--as", "bytes", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["a.bin"]["size"] == 3

    def test_read_as_text_refused_for_binary(self, workdir):
        (workdir / "a.bin").write_bytes(b"abc")
        result = runner.invoke(app, ["read", "a.bin", "--as", "text", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["a.bin"]["error"]["error_type"] == "TypeMismatchError"

    def test_unknown_extension(self, workdir):
        (workdir / "a.csv").write_text("x,y", encoding="utf-8")
        result = runner.invoke(app, ["read", "a.csv", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["a.csv"]["error"]["error_type"] == "NoSuitableHandlerError"


class TestWrite:
    def test_write_and_append(self, workdir):
        assert runner.invoke(app, ["write", "notes.txt", "one\n"]).exit_code == 0
        result = runner.invoke(app, ["write", "notes.txt", "two\n", "--mode", "append"])
        assert result.exit_code == 0
        assert (workdir / "notes.txt").read_text(encoding="utf-8") == "one\ntwo\n"

    def test_create_new_refuses_existing(self, workdir):
        (workdir / "notes.txt").write_text("keep", encoding="utf-8")
        result = runner.invoke(app, ["write", "notes.txt", "x", "--mode", "create_new"])
        assert result.exit_code == 1
        assert (workdir / "notes.txt").read_text(encoding="utf-8") == "keep"

    def test_non_text_target(self):
        result = runner.invoke(app, ["write", "data.json", "x"])
        assert result.exit_code == 1

    def test_default_mode_from_environment(self, workdir, monkeypatch):
        monkeypatch.setenv("FILESPINE_DEFAULT_WRITE_MODE", "append")
        (workdir / "notes.txt").write_text("a", encoding="utf-8")
        assert runner.invoke(app, ["write", "notes.txt", "b"]).exit_code == 0
        assert (workdir / "notes.txt").read_text(encoding="utf-8") == "ab"


class TestFormats:
    def test_json(self):
        result = runner.invoke(app, ["formats", "--json"])
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [row["format"] for row in rows] == ["TXT", "JSON", "YAML", "BINARY"]
        assert rows[0]["extensions"] == ".txt, .md, .log"
        assert rows[2]["capabilities"] == "object"

    def test_table(self):
        result = runner.invoke(app, ["formats"])
        assert result.exit_code == 0
        assert "JsonFileHandler" in result.output
