"""CLI tests for the check command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from snippet_check import __version__
from snippet_check.analyzer import AnalysisError
from snippet_check.cli import app
from snippet_check.probe import ProbeOutcome

runner = CliRunner()

LOOSE_SNIPPET = "var x = 1; if (x == 1) { console.log(x) }"


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Run heuristic quality checks" in result.stdout
    for command in ("check", "rules", "config", "config-init", "config-validate"):
        assert command in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_check_json_scores_loose_snippet(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "check",
            "--root",
            str(tmp_path),
            "--code",
            LOOSE_SNIPPET,
            "-l",
            "js",
            "--format",
            "json",
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert {"errors", "warnings", "suggestions", "isValid", "score", "grade", "meta"} == set(
        payload
    )
    assert payload["errors"] == []
    assert len(payload["warnings"]) == 2
    assert payload["isValid"] is True
    assert payload["score"] == 90
    assert payload["grade"] == "A"
    assert payload["meta"]["input_source"] == "code"
    assert payload["meta"]["language"] == "javascript"


def test_check_summary_variant(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "check",
            "--root",
            str(tmp_path),
            "--code",
            "function f() {",
            "-l",
            "javascript",
            "--format",
            "json",
            "--variant",
            "summary",
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["valid"] is False
    assert payload["issues"] == ["Unmatched braces: 1 open, 0 close"]
    assert payload["summary"] == "Found 1 issue(s)"


def test_check_human_output(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["check", "--root", str(tmp_path), "--code", LOOSE_SNIPPET, "-l", "js"]
    )
    assert result.exit_code == 0
    assert "Quality score: 90/100 (grade A) - javascript" in result.stdout
    assert "Warnings:" in result.stdout
    assert "No errors found." in result.stdout


def test_check_requires_language(tmp_path: Path) -> None:
    result = runner.invoke(app, ["check", "--root", str(tmp_path), "--code", "let x = 1;"])
    assert result.exit_code == 2


def test_check_rejects_empty_code_like_request_payloads(tmp_path: Path) -> None:
    result = runner.invoke(app, ["check", "--root", str(tmp_path), "--code", "", "-l", "js"])
    assert result.exit_code == 2
    assert "Missing required field(s): code" in result.output

    empty_stdin = runner.invoke(
        app, ["check", "--root", str(tmp_path), "--stdin", "-l", "css"], input=""
    )
    assert empty_stdin.exit_code == 2


def test_check_rejects_multiple_inputs(tmp_path: Path) -> None:
    snippet = tmp_path / "a.js"
    snippet.write_text("let x = 1;", encoding="utf-8")
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--code", "x", "--file", str(snippet), "-l", "js"],
    )
    assert result.exit_code == 2

    no_input = runner.invoke(app, ["check", "--root", str(tmp_path), "-l", "js"])
    assert no_input.exit_code == 2


def test_check_fail_under_sets_exit_code(tmp_path: Path) -> None:
    args = ["check", "--root", str(tmp_path), "--code", LOOSE_SNIPPET, "-l", "js"]
    args += ["--format", "json"]

    failing = runner.invoke(app, [*args, "--fail-under", "95"])
    assert failing.exit_code == 1
    assert json.loads(failing.stdout)["score"] == 90

    passing = runner.invoke(app, [*args, "--fail-under", "90"])
    assert passing.exit_code == 0


def test_check_file_infers_language_from_suffix(tmp_path: Path) -> None:
    snippet = tmp_path / "legacy.py"
    snippet.write_text('print "hi"\n', encoding="utf-8")
    result = runner.invoke(
        app, ["check", "--root", str(tmp_path), "--file", str(snippet), "--format", "json"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["errors"] == ["Missing parentheses in print() - Python 3 syntax"]
    assert payload["meta"]["language"] == "python"
    assert payload["meta"]["input_source"] == f"file:{snippet}"


def test_check_missing_file_is_usage_error(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--file", str(tmp_path / "nope.js"), "-l", "js"],
    )
    assert result.exit_code == 2


def test_check_reads_stdin(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--stdin", "-l", "css", "--format", "json"],
        input="a { color: red; }\n",
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["score"] == 100
    assert payload["meta"]["input_source"] == "stdin"


def test_check_request_file(tmp_path: Path) -> None:
    request = tmp_path / "request.json"
    request.write_text(json.dumps({"code": "const x;", "language": "js"}), encoding="utf-8")
    result = runner.invoke(
        app, ["check", "--root", str(tmp_path), "--request", str(request), "--format", "json"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert "const declaration without initialization" in payload["errors"]
    assert payload["isValid"] is False


def test_check_request_from_stdin(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--request", "-", "--format", "json"],
        input=json.dumps({"code": "p { float: left; }", "language": "css"}),
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["meta"]["language"] == "css"


@pytest.mark.parametrize(
    "body",
    [
        json.dumps({"code": "let x = 1;"}),
        json.dumps({"code": "", "language": "js"}),
        json.dumps(["not", "an", "object"]),
        "{not json",
    ],
)
def test_check_rejects_malformed_requests(tmp_path: Path, body: str) -> None:
    request = tmp_path / "request.json"
    request.write_text(body, encoding="utf-8")
    result = runner.invoke(app, ["check", "--root", str(tmp_path), "--request", str(request)])
    assert result.exit_code == 2


def test_check_request_cannot_take_language(tmp_path: Path) -> None:
    request = tmp_path / "request.json"
    request.write_text(json.dumps({"code": "x", "language": "js"}), encoding="utf-8")
    result = runner.invoke(
        app, ["check", "--root", str(tmp_path), "--request", str(request), "-l", "css"]
    )
    assert result.exit_code == 2


def test_check_strict_html_invalidates_report(tmp_path: Path) -> None:
    args = ["check", "--root", str(tmp_path), "-l", "html", "--format", "json"]
    args += ["--code", "<html><body><p>hi</body></html>"]

    lenient = json.loads(runner.invoke(app, args).stdout)
    assert lenient["isValid"] is True
    assert "Missing DOCTYPE declaration" in lenient["warnings"]

    strict = json.loads(runner.invoke(app, [*args, "--strict-html"]).stdout)
    assert strict["isValid"] is False
    assert strict["errors"] == ["Missing DOCTYPE declaration"]


def test_check_unknown_language_passes(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--code", "}}}", "-l", "cobol", "--format", "json"],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["isValid"] is True
    assert payload["score"] == 100
    assert payload["meta"]["language"] is None


def test_check_probe_failure_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    created: list[dict[str, object]] = []

    class _FakeNodeProbe:
        def __init__(self, **kwargs: object) -> None:
            created.append(kwargs)

        def run(self, source: str) -> ProbeOutcome:
            _ = source
            return ProbeOutcome(ok=False, message="ReferenceError: y is not defined")

    monkeypatch.setattr("snippet_check.cli.NodeProbe", _FakeNodeProbe)
    result = runner.invoke(
        app,
        [
            "check",
            "--root",
            str(tmp_path),
            "--code",
            "let x = y;",
            "-l",
            "js",
            "--format",
            "json",
            "--probe",
            "--timeout",
            "2",
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["errors"] == ["Runtime error: ReferenceError: y is not defined"]
    assert payload["score"] == 75
    assert created == [{"node_binary": "node", "timeout_seconds": 2.0}]


def test_check_probe_rejects_bad_timeout(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--code", "x", "-l", "js", "--probe", "--timeout", "0"],
    )
    assert result.exit_code == 2


def test_check_analysis_failure_emits_error_payload(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fail_analyze(*args: object, **kwargs: object) -> None:
        raise AnalysisError("Analysis failed: boom")

    monkeypatch.setattr("snippet_check.cli.analyze", fail_analyze)
    result = runner.invoke(
        app,
        ["check", "--root", str(tmp_path), "--code", "x", "-l", "js", "--format", "json"],
    )
    assert result.exit_code == 1
    assert json.loads(result.stdout) == {
        "error": "analysis failed",
        "details": "Analysis failed: boom",
    }


def test_log_level_is_validated() -> None:
    result = runner.invoke(app, ["--log-level", "chatty", "rules"])
    assert result.exit_code == 2
