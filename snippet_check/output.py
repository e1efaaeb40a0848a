"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from snippet_check import __version__
from snippet_check.analyzer import AnalysisReport
from snippet_check.rules.base import Finding

_SECTION_STYLES = (
    ("error", "Errors", "red"),
    ("warning", "Warnings", "yellow"),
    ("suggestion", "Suggestions", "cyan"),
)


def render_human(report: AnalysisReport) -> str:
    """Render a compact colorized summary."""
    color = _grade_color(report.grade)
    language = report.language or "unknown language"
    lines: list[str] = [
        click.style(
            f"Quality score: {report.score}/100 (grade {report.grade}) - {language}",
            fg=color,
            bold=True,
        )
    ]

    for severity, title, section_color in _SECTION_STYLES:
        findings = [item for item in report.findings if item.severity == severity]
        if not findings:
            continue
        lines.append(click.style(f"{title}:", fg=section_color, bold=True))
        for finding in findings:
            lines.append(f"- [{finding.rule_id}] {finding.message}")

    if report.is_valid:
        lines.append(click.style("No errors found.", fg="green"))
    return "\n".join(lines)


def render_json(
    report: AnalysisReport,
    *,
    variant: str = "scored",
    input_source: str | None = None,
) -> str:
    """Render stable JSON output for CI and automation."""
    payload = build_payload(report, variant=variant)
    if input_source is not None:
        payload["meta"] = _build_meta(report, input_source=input_source)
    return json.dumps(payload, sort_keys=True)


def build_payload(report: AnalysisReport, *, variant: str = "scored") -> dict[str, Any]:
    """Build the response body for the requested variant."""
    if variant == "summary":
        return build_summary_payload(report)
    if variant == "scored":
        return build_scored_payload(report)
    raise ValueError(f"Unknown response variant '{variant}'. Expected one of: scored, summary")


def build_scored_payload(report: AnalysisReport) -> dict[str, Any]:
    """Build ``{errors, warnings, suggestions, isValid, score, grade}``."""
    return {
        "errors": report.errors,
        "warnings": report.warnings,
        "suggestions": report.suggestions,
        "isValid": report.is_valid,
        "score": report.score,
        "grade": report.grade,
    }


def build_summary_payload(report: AnalysisReport) -> dict[str, Any]:
    """Build ``{valid, issues, warnings, suggestions, summary}``."""
    issues = report.errors
    return {
        "valid": report.is_valid,
        "issues": issues,
        "warnings": report.warnings,
        "suggestions": report.suggestions,
        "summary": "Code looks good!" if not issues else f"Found {len(issues)} issue(s)",
    }


def build_error_payload(message: str, *, details: str | None = None) -> dict[str, Any]:
    """Build the body returned when a request cannot be analyzed."""
    payload: dict[str, Any] = {"error": message}
    if details is not None:
        payload["details"] = details
    return payload


def _build_meta(report: AnalysisReport, *, input_source: str) -> dict[str, Any]:
    return {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "input_source": input_source,
        "language": report.language,
        "findings": [_serialize_finding(item) for item in report.findings],
        "version": __version__,
    }


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "rule_id": finding.rule_id,
        "severity": finding.severity,
        "message": finding.message,
    }


def _grade_color(grade: str) -> str:
    if grade in {"A", "B"}:
        return "green"
    if grade in {"C", "D"}:
        return "yellow"
    return "red"
