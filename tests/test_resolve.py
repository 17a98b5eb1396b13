from __future__ import annotations

import os

import pytest

from codex_server.resolve import (
    ReviewTarget,
    TargetKind,
    is_regular_file,
    normalize_path,
    resolve_context,
)


def test_resolve_context_reads_file(tmp_path):
    notes = tmp_path / "notes.md"
    notes.write_text("# Plan\n\n1. refactor\n")

    assert resolve_context(str(notes)) == f"File: {notes}\n\n# Plan\n\n1. refactor\n"


def test_resolve_context_normalizes_path(tmp_path):
    (tmp_path / "a.txt").write_text("alpha")
    messy = f"{tmp_path}/sub/../a.txt"

    assert resolve_context(messy) == f"File: {tmp_path / 'a.txt'}\n\nalpha"


def test_resolve_context_relative_to_workspace(tmp_path):
    (tmp_path / "b.txt").write_text("beta")

    assert resolve_context("b.txt", workspace=tmp_path) == f"File: {tmp_path / 'b.txt'}\n\nbeta"


@pytest.mark.parametrize("value", [
    "just some words",
    "/nonexistent/path.go",
    "x" * 5000,
    "bad\x00path",
    "def f():\n    return 1\n",
])
def test_resolve_context_falls_back_to_literal(value):
    assert resolve_context(value) == value


def test_resolve_context_directory_is_literal(tmp_path):
    assert resolve_context(str(tmp_path)) == str(tmp_path)


def test_resolve_context_read_error_is_literal(tmp_path, monkeypatch):
    target = tmp_path / "c.txt"
    target.write_text("gamma")

    def fail(path):
        raise PermissionError("denied")

    monkeypatch.setattr("codex_server.resolve.read_file", fail)

    assert resolve_context(str(target)) == str(target)


def test_resolve_context_keeps_undecodable_bytes(tmp_path):
    raw = b"/* caf\xe9 */\n"
    source = tmp_path / "latin1.c"
    source.write_bytes(raw)

    result = resolve_context(str(source))

    assert result.startswith(f"File: {source}\n\n")
    assert os.fsencode(result).endswith(raw)


def test_normalize_path_keeps_absolute_paths(tmp_path):
    assert normalize_path("/etc/../etc/hosts", workspace=tmp_path) == os.path.normpath("/etc/hosts")


def test_is_regular_file_rejects_empty():
    assert is_regular_file("") is False


@pytest.mark.parametrize("target", ["current changes", "git diff", "  Current Changes  ", "GIT DIFF\n"])
def test_classify_keywords(target, tmp_path):
    resolved = ReviewTarget.classify(target)
    assert resolved.kind is TargetKind.RECENT_CHANGES
    assert resolved.value == target


def test_classify_keyword_wins_over_file(tmp_path):
    (tmp_path / "git diff").write_text("not a diff")

    resolved = ReviewTarget.classify("git diff", workspace=tmp_path)

    assert resolved.kind is TargetKind.RECENT_CHANGES


def test_classify_file(tmp_path):
    source = tmp_path / "app.py"
    source.write_text("print('hi')\n")

    resolved = ReviewTarget.classify(str(source))

    assert resolved == ReviewTarget(TargetKind.FILE_PATH, str(source))


def test_classify_literal_keeps_original_text():
    snippet = "  current  changes in x.go  "
    resolved = ReviewTarget.classify(snippet)

    assert resolved.kind is TargetKind.LITERAL_TEXT
    assert resolved.value == snippet


def test_classify_missing_path_is_literal():
    resolved = ReviewTarget.classify("/nonexistent/path.go")
    assert resolved == ReviewTarget(TargetKind.LITERAL_TEXT, "/nonexistent/path.go")
