"""CSS rule set."""

from __future__ import annotations

import re

from snippet_check.rules.base import Finding, Severity
from snippet_check.rules.patterns import DelimiterBalanceRule, PatternRule, UnpairedPatternRule

IMPORTANT_THRESHOLD = 3


class UnbalancedBracesRule(DelimiterBalanceRule):
    """Flags a mismatch between `{` and `}` counts in a stylesheet."""

    rule_id = "css_unbalanced_braces"
    label = "braces in CSS"


class ImportantOveruseRule:
    """Flags heavy use of `!important`."""

    rule_id = "css_important_overuse"
    severity: Severity = "warning"
    threshold = IMPORTANT_THRESHOLD

    def inspect(self, text: str) -> Finding | None:
        count = len(re.findall(r"!\s*important\b", text, flags=re.IGNORECASE))
        if count <= self.threshold:
            return None
        return Finding(
            rule_id=self.rule_id,
            severity=self.severity,
            message=f"!important used {count} times; reduce specificity overrides",
        )


class FloatWithoutClearRule(UnpairedPatternRule):
    """Suggests a clearing rule for float-based layouts."""

    rule_id = "css_float_without_clear"
    severity: Severity = "suggestion"
    pattern = re.compile(r"\bfloat\s*:\s*(?!none\b)[a-z]", re.IGNORECASE)
    counterpart = re.compile(r"\bclear\s*:|clearfix|flow-root", re.IGNORECASE)
    message = "float used without a clearing rule; consider flexbox/grid or a clearfix"


class EmptyValueRule(PatternRule):
    """Flags declarations with no value."""

    rule_id = "css_empty_value"
    severity: Severity = "warning"
    pattern = re.compile(r"[{;]\s*[\w-]+\s*:\s*[;}]")
    message = "Possible missing property value"


CSS_RULES = (
    UnbalancedBracesRule,
    ImportantOveruseRule,
    FloatWithoutClearRule,
    EmptyValueRule,
)
