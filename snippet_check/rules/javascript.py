"""JavaScript-family rule set."""

from __future__ import annotations

import re

from snippet_check.rules.base import Finding, Severity
from snippet_check.rules.patterns import DelimiterBalanceRule, PatternRule, UnpairedPatternRule

MAX_LINE_LENGTH = 120
STRICT_MODE_MIN_LENGTH = 100


class UnbalancedBracesRule(DelimiterBalanceRule):
    """Flags a mismatch between `{` and `}` counts."""

    rule_id = "js_unbalanced_braces"
    opener = "{"
    closer = "}"
    label = "braces"


class UnbalancedParensRule(DelimiterBalanceRule):
    """Flags a mismatch between `(` and `)` counts."""

    rule_id = "js_unbalanced_parens"
    opener = "("
    closer = ")"
    label = "parentheses"


class UnbalancedBracketsRule(DelimiterBalanceRule):
    """Flags a mismatch between `[` and `]` counts."""

    rule_id = "js_unbalanced_brackets"
    opener = "["
    closer = "]"
    label = "brackets"


class VarDeclarationRule(PatternRule):
    """Flags function-scoped `var` declarations."""

    rule_id = "js_var_declaration"
    severity: Severity = "warning"
    pattern = re.compile(r"\bvar\s+[\w$\[{]")
    message = "Use const/let instead of var for block scoping"


class LooseEqualityRule(PatternRule):
    """Flags `==` and `!=` comparisons."""

    rule_id = "js_loose_equality"
    severity: Severity = "warning"
    pattern = re.compile(r"(?<![=!<>])[=!]=(?!=)")
    message = "Loose equality (== or !=) used; prefer strict equality (=== or !==)"


class DynamicEvalRule(PatternRule):
    """Flags eval() and the Function constructor."""

    rule_id = "js_dynamic_eval"
    severity: Severity = "error"
    pattern = re.compile(r"\beval\s*\(|\bnew\s+Function\s*\(")
    message = "Security risk: dynamic code evaluation with eval() or new Function()"


class AwaitWithoutTryRule(UnpairedPatternRule):
    """Flags `await` in snippets that never open a try block."""

    rule_id = "js_await_without_try"
    severity: Severity = "warning"
    pattern = re.compile(r"\bawait\b")
    counterpart = re.compile(r"\btry\s*\{")
    message = "await used without try/catch; rejected promises will go unhandled"


class PromiseWithoutCatchRule(UnpairedPatternRule):
    """Flags `.then()` chains that never attach `.catch()`."""

    rule_id = "js_promise_without_catch"
    severity: Severity = "warning"
    pattern = re.compile(r"\.then\s*\(")
    counterpart = re.compile(r"\.catch\s*\(")
    message = "Promise chain uses .then() without a .catch() handler"


class RawHtmlSinkRule(PatternRule):
    """Flags writes to raw HTML sinks."""

    rule_id = "js_raw_html_sink"
    severity: Severity = "warning"
    pattern = re.compile(
        r"\.(?:inner|outer)HTML\s*\+?=(?!=)"
        r"|\bdocument\.write(?:ln)?\s*\("
        r"|\.insertAdjacentHTML\s*\("
    )
    message = "Injection risk: raw HTML assigned without sanitization (prefer textContent)"


class LoopLengthLookupRule(PatternRule):
    """Flags loop conditions that re-read `.length` on every iteration."""

    rule_id = "js_loop_length_lookup"
    severity: Severity = "suggestion"
    pattern = re.compile(r"\bfor\s*\([^;)]*;[^;]*\.length\s*;")
    message = "Cache the collection length outside the loop condition"


class IntervalWithoutClearRule(UnpairedPatternRule):
    """Flags setInterval() without any clearInterval()."""

    rule_id = "js_interval_without_clear"
    severity: Severity = "warning"
    pattern = re.compile(r"\bsetInterval\s*\(")
    counterpart = re.compile(r"\bclearInterval\s*\(")
    message = "setInterval() without clearInterval(); the timer may leak"


class ListenerWithoutRemovalRule(UnpairedPatternRule):
    """Flags addEventListener() without any removeEventListener()."""

    rule_id = "js_listener_without_removal"
    severity: Severity = "suggestion"
    pattern = re.compile(r"\baddEventListener\s*\(")
    counterpart = re.compile(r"\bremoveEventListener\s*\(")
    message = "Event listener added without removeEventListener(); consider cleaning it up"


class LongLinesRule:
    """Reports lines longer than 120 characters once, with a count."""

    rule_id = "js_long_lines"
    severity: Severity = "suggestion"
    max_length = MAX_LINE_LENGTH

    def inspect(self, text: str) -> Finding | None:
        long_lines = sum(1 for line in text.splitlines() if len(line) > self.max_length)
        if long_lines == 0:
            return None
        return Finding(
            rule_id=self.rule_id,
            severity=self.severity,
            message=(
                f"{long_lines} line(s) exceed {self.max_length} characters; "
                "wrap them for readability"
            ),
        )


class ConsoleLogCallRule(PatternRule):
    """Flags `console.log` that is never called."""

    rule_id = "js_console_log_call"
    severity: Severity = "error"
    pattern = re.compile(r"\bconsole\.log\b(?!\s*\()")
    message = "Missing parentheses in console.log()"


class ConstWithoutInitRule(PatternRule):
    """Flags `const` declarations without an initializer."""

    rule_id = "js_const_without_init"
    severity: Severity = "error"
    pattern = re.compile(r"\bconst\s+[\w$]+\s*;")
    message = "const declaration without initialization"


class EmptyIfRule(PatternRule):
    """Flags `if (...);` statements with an empty body."""

    rule_id = "js_empty_if"
    severity: Severity = "warning"
    pattern = re.compile(r"\bif\s*\([^)]+\)\s*;")
    message = "Empty if statement detected"


class EmptyFunctionRule(PatternRule):
    """Flags named functions with an empty body."""

    rule_id = "js_empty_function"
    severity: Severity = "warning"
    pattern = re.compile(r"\bfunction\s+[\w$]+\s*\([^)]*\)\s*\{\s*\}")
    message = "Empty function detected"


class MissingUseStrictRule:
    """Suggests strict mode for snippets longer than 100 characters."""

    rule_id = "js_missing_use_strict"
    severity: Severity = "suggestion"

    def inspect(self, text: str) -> Finding | None:
        if len(text) <= STRICT_MODE_MIN_LENGTH or "use strict" in text:
            return None
        return Finding(
            rule_id=self.rule_id,
            severity=self.severity,
            message='Consider adding "use strict" for better error catching',
        )


JAVASCRIPT_RULES = (
    UnbalancedBracesRule,
    UnbalancedParensRule,
    UnbalancedBracketsRule,
    VarDeclarationRule,
    LooseEqualityRule,
    DynamicEvalRule,
    AwaitWithoutTryRule,
    PromiseWithoutCatchRule,
    RawHtmlSinkRule,
    LoopLengthLookupRule,
    IntervalWithoutClearRule,
    ListenerWithoutRemovalRule,
    LongLinesRule,
    ConsoleLogCallRule,
    ConstWithoutInitRule,
    EmptyIfRule,
    EmptyFunctionRule,
    MissingUseStrictRule,
)
