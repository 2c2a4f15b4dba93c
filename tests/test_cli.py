"""Regression tests for the mdbook-rfc command line."""

import io
import json
import subprocess

import pytest

from rfcbook import cli


def test_supports_positional_exit_codes() -> None:
    assert cli.run(["supports", "rfc"]) == 0
    assert cli.run(["supports", "pdf"]) == 1


def test_supports_option_form() -> None:
    assert cli.run(["supports", "--renderer", "rfc"]) == 0
    assert cli.run(["supports", "-r", "html"]) == 1


def test_main_exits_with_supports_code() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["supports", "pdf"])
    assert exc_info.value.code == 1


def test_no_subcommand_preprocesses(payload_json, book_data) -> None:
    out = io.StringIO()
    assert cli.run([], stdin=io.StringIO(payload_json), stdout=out) == 0
    assert json.loads(out.getvalue()) == book_data


def test_preprocess_failure_reports_on_stderr(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("[{}]"))
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    captured = capsys.readouterr()
    assert exc_info.value.code == 1
    assert captured.out == ""
    assert "The process could not be completed" in captured.err
    assert "Could not parse command input." in captured.err
    assert "caused by: DecodeError" in captured.err


def test_folder_option_before_and_after_subcommand(book_root, monkeypatch) -> None:
    calls = []

    def fake_run(cmd, cwd=None, **kwargs):
        calls.append(cwd)
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr("rfcbook.project.subprocess.run", fake_run)

    assert cli.run(["--folder", str(book_root), "build"]) == 0
    assert cli.run(["build", "-f", str(book_root)]) == 0
    assert calls == [str(book_root), str(book_root)]


def test_failed_build_exits_non_zero(book_root, monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        "rfcbook.project.subprocess.run",
        lambda cmd, cwd=None, **kw: subprocess.CompletedProcess(cmd, 2),
    )
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["build", "--folder", str(book_root)])
    assert exc_info.value.code == 1
    assert "Could not build book." in capsys.readouterr().err


def test_new_subcommand(book_root) -> None:
    (book_root / "template").mkdir()
    (book_root / "template" / "page.md").write_text("# New page\n", encoding="utf-8")
    assert cli.run(["new", "hello", "-f", str(book_root)]) == 0
    assert (book_root / "text" / "hello.md").exists()


def test_unknown_subcommand_is_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.run(["publish"])
    assert exc_info.value.code == 2
    assert "usage" in capsys.readouterr().err.lower()


def test_invalid_utf8_on_stdin_is_a_decode_error(payload, monkeypatch, capsys) -> None:
    raw = json.dumps(payload).encode("utf-8").replace(b"Chapter 1", b"A\xff")
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(raw), errors="surrogateescape"))

    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    captured = capsys.readouterr()
    assert exc_info.value.code == 1
    assert captured.out == ""
    assert "Could not parse command input." in captured.err
    assert "not valid UTF-8" in captured.err


def test_preprocess_reads_and_writes_utf8_bytes(payload, monkeypatch, capsys) -> None:
    payload[1]["sections"][0]["Chapter"]["content"] = "# Café ✓\n"
    raw = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(raw), encoding="latin-1"))

    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 0
    book = json.loads(capsys.readouterr().out)
    assert book["sections"][0]["Chapter"]["content"] == "# Café ✓\n"
