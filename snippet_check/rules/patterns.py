"""Reusable textual rule shapes shared by the language rule sets."""

from __future__ import annotations

import re

from snippet_check.rules.base import Finding, Severity


class DelimiterBalanceRule:
    """Compares raw opener/closer character counts across the whole text."""

    rule_id = ""
    severity: Severity = "error"
    opener = "{"
    closer = "}"
    label = "braces"

    def inspect(self, text: str) -> Finding | None:
        opened = text.count(self.opener)
        closed = text.count(self.closer)
        if opened == closed:
            return None
        return Finding(
            rule_id=self.rule_id,
            severity=self.severity,
            message=f"Unmatched {self.label}: {opened} open, {closed} close",
        )


class PatternRule:
    """Reports once when ``pattern`` occurs anywhere in the text."""

    rule_id = ""
    severity: Severity = "warning"
    pattern: re.Pattern[str] = re.compile(r"(?!)")
    message = ""

    def inspect(self, text: str) -> Finding | None:
        if self.pattern.search(text) is None:
            return None
        return Finding(rule_id=self.rule_id, severity=self.severity, message=self.message)


class UnpairedPatternRule:
    """Reports when ``pattern`` occurs but ``counterpart`` never does."""

    rule_id = ""
    severity: Severity = "warning"
    pattern: re.Pattern[str] = re.compile(r"(?!)")
    counterpart: re.Pattern[str] = re.compile(r"(?!)")
    message = ""

    def inspect(self, text: str) -> Finding | None:
        if self.pattern.search(text) is None:
            return None
        if self.counterpart.search(text) is not None:
            return None
        return Finding(rule_id=self.rule_id, severity=self.severity, message=self.message)
