# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the docextract CLI (in-process, via main(argv)).

Covers:
- plain text and --json output on stdout
- --debug trace placement
- stdin input and --encoding
- exit codes: 0 success, 1 input error, 2 insufficient content
"""

from __future__ import annotations

import io
import json
import sys

import pytest

from docextract.cli import EXIT_INPUT_ERROR, EXIT_INSUFFICIENT, EXIT_OK, build_parser, main
from docextract.config import ENV_PREFIX
from tests._dom_helpers import html, prose


@pytest.fixture(autouse=True)
def _reset(reset_logging):
    yield


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


@pytest.fixture
def doc_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(html(f"<main>{prose(2000)}</main>"), encoding="utf-8")
    return path


@pytest.fixture
def banner_file(tmp_path):
    path = tmp_path / "banner.html"
    path.write_text(html("<div>" + "cookie consent accept all " * 10 + "</div>"), encoding="utf-8")
    return path


# ── Success ──────────────────────────────────────────────────────────


class TestExtractSuccess:
    def test_plain_text_to_stdout(self, doc_file, capsys):
        assert _run(["extract", str(doc_file)]) == EXIT_OK
        captured = capsys.readouterr()
        assert captured.out.strip() == prose(2000)

    def test_json_output(self, doc_file, capsys):
        assert _run(["extract", str(doc_file), "--json"]) == EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["content"] == prose(2000)
        assert payload["tier"] == "main"
        assert "debug" not in payload

    def test_json_debug_embeds_trace(self, doc_file, capsys):
        assert _run(["extract", str(doc_file), "--json", "--debug"]) == EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["debug"]["succeeded_tier"] == 2
        assert payload["debug"]["main_element_tag"] == "main"

    def test_text_debug_goes_to_stderr(self, doc_file, capsys):
        assert _run(["extract", str(doc_file), "--debug"]) == EXIT_OK
        captured = capsys.readouterr()
        assert "succeeded_tier: 2" in captured.err
        assert "succeeded_tier" not in captured.out

    def test_stdin(self, monkeypatch, capsys):
        data = html(f"<main>{prose(2000)}</main>").encode("utf-8")
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
        assert _run(["extract", "-"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == prose(2000)

    def test_explicit_encoding(self, tmp_path, capsys):
        text = prose(300, "Die Übersicht erklärt jeden Schritt der Einrichtung. ")
        path = tmp_path / "latin.html"
        path.write_bytes(html(f"<p>{text}</p>").encode("latin-1"))
        assert _run(["extract", str(path), "--encoding", "latin-1"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == text


# ── Failures ─────────────────────────────────────────────────────────


class TestExtractFailures:
    def test_insufficient_content_exit_code(self, banner_file, capsys):
        assert _run(["extract", str(banner_file)]) == EXIT_INSUFFICIENT
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "no acceptable content" in captured.err

    def test_insufficient_content_json(self, banner_file, capsys):
        assert _run(["extract", str(banner_file), "--json", "--debug"]) == EXIT_INSUFFICIENT
        payload = json.loads(capsys.readouterr().out)
        assert payload["content"] is None
        assert payload["tier"] is None
        assert payload["debug"]["succeeded_tier"] is None

    def test_missing_file(self, tmp_path, capsys):
        assert _run(["extract", str(tmp_path / "nope.html")]) == EXIT_INPUT_ERROR
        assert "cannot read" in capsys.readouterr().err

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.html"
        path.write_text("   ", encoding="utf-8")
        assert _run(["extract", str(path)]) == EXIT_INPUT_ERROR
        assert "Empty HTML input" in capsys.readouterr().err

    def test_unknown_encoding(self, doc_file, capsys):
        assert _run(["extract", str(doc_file), "--encoding", "no-such-codec"]) == EXIT_INPUT_ERROR

    def test_bad_threshold_env(self, doc_file, monkeypatch, capsys):
        monkeypatch.setenv(f"{ENV_PREFIX}MAIN_MIN_LENGTH", "lots")
        assert _run(["extract", str(doc_file)]) == EXIT_INPUT_ERROR
        assert "DOCEXTRACT_MAIN_MIN_LENGTH" in capsys.readouterr().err

    def test_threshold_env_applied(self, doc_file, monkeypatch, capsys):
        monkeypatch.setenv(f"{ENV_PREFIX}MAIN_MIN_LENGTH", "2500")
        assert _run(["extract", str(doc_file), "--json"]) == EXIT_OK
        assert json.loads(capsys.readouterr().out)["tier"] == "main-selectors"


# ── Parser ───────────────────────────────────────────────────────────


class TestParser:
    def test_command_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_global_options(self):
        args = build_parser().parse_args(["--log-level", "DEBUG", "--json-logs", "extract", "x.html"])
        assert args.log_level == "DEBUG"
        assert args.json_logs is True
        assert args.file == "x.html"

    def test_defaults(self):
        args = build_parser().parse_args(["extract", "-"])
        assert args.log_level == "WARNING"
        assert not args.json
        assert not args.debug
        assert args.encoding is None
