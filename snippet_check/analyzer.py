"""Analysis orchestration: dispatch, rule evaluation, probe and scoring."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from snippet_check.languages import select_rules
from snippet_check.probe import Probe, ProbeUnavailableError
from snippet_check.rules.base import Finding, Rule, Severity
from snippet_check.scoring import compute_score, grade_for, severity_counts

logger = logging.getLogger(__name__)

PROBE_RULE_ID = "js_runtime_probe"


class RequestError(ValueError):
    """Raised when an analysis request is missing required fields."""


class AnalysisError(RuntimeError):
    """Raised when rule evaluation fails unexpectedly."""


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """Immutable analysis input."""

    source: str
    language: str


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Complete analysis output for one request."""

    language: str | None
    findings: tuple[Finding, ...]
    is_valid: bool
    score: int
    grade: str

    @property
    def errors(self) -> list[str]:
        return self._messages("error")

    @property
    def warnings(self) -> list[str]:
        return self._messages("warning")

    @property
    def suggestions(self) -> list[str]:
        return self._messages("suggestion")

    def _messages(self, severity: Severity) -> list[str]:
        return [finding.message for finding in self.findings if finding.severity == severity]


def parse_request(payload: Mapping[str, Any]) -> AnalysisRequest:
    """Validate a ``{"code": ..., "language": ...}`` payload."""
    code = payload.get("code")
    language = payload.get("language")
    missing = [
        name for name, value in (("code", code), ("language", language)) if value in (None, "")
    ]
    if missing:
        raise RequestError(f"Missing required field(s): {', '.join(missing)}")
    if not isinstance(code, str):
        raise RequestError("code must be a string")
    if not isinstance(language, str):
        raise RequestError("language must be a string")
    return AnalysisRequest(source=code, language=language)


def analyze(
    request: AnalysisRequest,
    *,
    rules: list[Rule] | None = None,
    probe: Probe | None = None,
    html_strict: bool = False,
) -> AnalysisReport:
    """Analyze a snippet and return a scored report.

    ``rules`` overrides the dispatcher's rule set for the language. The probe
    only runs for JavaScript-family languages.
    """
    plan = select_rules(request.language, html_strict=html_strict)
    active_rules = rules if rules is not None else plan.rules
    if plan.language is None:
        logger.info("Unknown language %r; no rules applied", request.language)

    try:
        findings = tuple(_evaluate(active_rules, request.source))
    except Exception as exc:
        logger.exception("Rule evaluation failed for language %r", request.language)
        raise AnalysisError(f"Analysis failed: {exc}") from exc

    if probe is not None and plan.probe_applies:
        findings += _probe_findings(probe, request.source)

    report = build_report(plan.language, findings)
    logger.debug(
        "Analyzed %s snippet: %d finding(s), score %d",
        plan.language or "unknown",
        len(report.findings),
        report.score,
    )
    return report


def analyze_payload(
    payload: Mapping[str, Any],
    *,
    probe: Probe | None = None,
    html_strict: bool = False,
) -> AnalysisReport:
    """Validate a boundary payload and analyze it."""
    return analyze(parse_request(payload), probe=probe, html_strict=html_strict)


def build_report(language: str | None, findings: tuple[Finding, ...]) -> AnalysisReport:
    """Aggregate findings into a report with validity, score and grade."""
    counts = severity_counts(findings)
    score = compute_score(counts["error"], counts["warning"], counts["suggestion"])
    return AnalysisReport(
        language=language,
        findings=findings,
        is_valid=counts["error"] == 0,
        score=score,
        grade=grade_for(score),
    )


def _evaluate(rules: list[Rule], text: str) -> Iterator[Finding]:
    for rule in rules:
        finding = rule.inspect(text)
        if finding is not None:
            yield finding


def _probe_findings(probe: Probe, source: str) -> tuple[Finding, ...]:
    try:
        outcome = probe.run(source)
    except ProbeUnavailableError as exc:
        logger.warning("Skipping runtime probe: %s", exc)
        return ()
    if outcome.ok:
        return ()
    return (
        Finding(
            rule_id=PROBE_RULE_ID,
            severity="error",
            message=f"Runtime error: {outcome.message}",
        ),
    )
