"""Python rule set."""

from __future__ import annotations

import re

from snippet_check.rules.base import Finding, Severity
from snippet_check.rules.patterns import PatternRule

_DEF_HEADER = re.compile(
    r"^(?P<indent>[ \t]*)(?:async[ \t]+)?def[ \t]+(?P<name>\w+)[ \t]*\(.*\)[^:]*:[ \t]*(?:#.*)?$"
)
_INDENTED_LINE = re.compile(r"^([ \t]+)\S", re.MULTILINE)


class PrintStatementRule(PatternRule):
    """Flags Python 2 style `print x` statements."""

    rule_id = "py_print_statement"
    severity: Severity = "error"
    pattern = re.compile(r"\bprint[ \t]+[^(\s=]")
    message = "Missing parentheses in print() - Python 3 syntax"


class EmptyFunctionRule:
    """Flags a `def` header that is not followed by an indented body."""

    rule_id = "py_empty_function"
    severity: Severity = "error"

    def inspect(self, text: str) -> Finding | None:
        lines = text.splitlines()
        for index, line in enumerate(lines):
            match = _DEF_HEADER.match(line)
            if match is None:
                continue
            body = _next_code_line(lines, index + 1)
            if body is None or _indent_width(body) <= _indent_width(match.group("indent")):
                return Finding(
                    rule_id=self.rule_id,
                    severity=self.severity,
                    message=f"Empty function definition: {match.group('name')}()",
                )
        return None


class MixedIndentationRule:
    """Samples indentation prefixes and flags inconsistent ones."""

    rule_id = "py_mixed_indentation"
    severity: Severity = "warning"

    def inspect(self, text: str) -> Finding | None:
        prefixes = _INDENTED_LINE.findall(text)
        if not prefixes:
            return None

        uses_tabs = any("\t" in prefix for prefix in prefixes)
        uses_spaces = any(" " in prefix for prefix in prefixes)
        if uses_tabs and uses_spaces:
            return Finding(
                rule_id=self.rule_id,
                severity=self.severity,
                message="Inconsistent indentation detected: tabs and spaces are mixed",
            )

        if uses_spaces:
            widths = sorted({len(prefix) for prefix in prefixes})
            unit = widths[0]
            if any(width % unit for width in widths):
                return Finding(
                    rule_id=self.rule_id,
                    severity=self.severity,
                    message=(
                        "Inconsistent indentation detected: widths "
                        f"{', '.join(str(width) for width in widths)} are not multiples of {unit}"
                    ),
                )
        return None


def _next_code_line(lines: list[str], start: int) -> str | None:
    for line in lines[start:]:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return line
    return None


def _indent_width(line: str) -> int:
    expanded = line.expandtabs(8)
    return len(expanded) - len(expanded.lstrip(" "))


PYTHON_RULES = (
    PrintStatementRule,
    EmptyFunctionRule,
    MixedIndentationRule,
)
