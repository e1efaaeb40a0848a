"""Tests for the JavaScript-family rule set."""

from __future__ import annotations

import pytest

from snippet_check.rules.javascript import (
    AwaitWithoutTryRule,
    ConsoleLogCallRule,
    ConstWithoutInitRule,
    DynamicEvalRule,
    EmptyFunctionRule,
    EmptyIfRule,
    IntervalWithoutClearRule,
    ListenerWithoutRemovalRule,
    LongLinesRule,
    LoopLengthLookupRule,
    LooseEqualityRule,
    MissingUseStrictRule,
    PromiseWithoutCatchRule,
    RawHtmlSinkRule,
    UnbalancedBracesRule,
    UnbalancedBracketsRule,
    UnbalancedParensRule,
    VarDeclarationRule,
)


def test_delimiter_rules_report_counts() -> None:
    braces = UnbalancedBracesRule().inspect("function f() {")
    parens = UnbalancedParensRule().inspect("f((1)")
    brackets = UnbalancedBracketsRule().inspect("[1, [2]")

    assert braces is not None
    assert braces.severity == "error"
    assert braces.message == "Unmatched braces: 1 open, 0 close"
    assert parens is not None
    assert parens.message == "Unmatched parentheses: 2 open, 1 close"
    assert brackets is not None
    assert brackets.message == "Unmatched brackets: 2 open, 1 close"


@pytest.mark.parametrize(
    "snippet",
    [
        "function f() { return [1, 2]; }",
        "const a = { b: [f(1), g(2)] };",
        "",
    ],
)
def test_balanced_snippets_have_no_delimiter_findings(snippet: str) -> None:
    for rule in (UnbalancedBracesRule(), UnbalancedParensRule(), UnbalancedBracketsRule()):
        assert rule.inspect(snippet) is None


def test_delimiter_count_ignores_string_context() -> None:
    finding = UnbalancedBracesRule().inspect("const s = '{';")
    assert finding is not None
    assert finding.message == "Unmatched braces: 1 open, 0 close"


def test_var_declaration_is_a_warning() -> None:
    finding = VarDeclarationRule().inspect("var x = 1;")
    assert finding is not None
    assert finding.severity == "warning"
    assert VarDeclarationRule().inspect("const variable = 1;") is None


@pytest.mark.parametrize(
    ("snippet", "flagged"),
    [
        ("if (a == b) {}", True),
        ("if (a != b) {}", True),
        ("if (a === b) {}", False),
        ("if (a !== b) {}", False),
        ("const ok = (x) => x >= 1 && x <= 3;", False),
    ],
)
def test_loose_equality_only_flags_double_equals(snippet: str, flagged: bool) -> None:
    assert (LooseEqualityRule().inspect(snippet) is not None) is flagged


def test_dynamic_eval_is_a_security_error() -> None:
    rule = DynamicEvalRule()
    eval_finding = rule.inspect("eval('1+1')")
    assert eval_finding is not None
    assert eval_finding.severity == "error"
    assert "Security risk" in eval_finding.message
    assert rule.inspect("const f = new Function('return 1');") is not None
    assert rule.inspect("evaluate(x);") is None


def test_await_requires_try_block() -> None:
    rule = AwaitWithoutTryRule()
    assert rule.inspect("async function f() { await g(); }") is not None
    assert rule.inspect("async function f() { try { await g(); } catch (e) {} }") is None


def test_then_requires_catch() -> None:
    rule = PromiseWithoutCatchRule()
    assert rule.inspect("p.then((x) => x);") is not None
    assert rule.inspect("p.then((x) => x).catch((e) => e);") is None


def test_raw_html_sinks_are_flagged() -> None:
    rule = RawHtmlSinkRule()
    assert rule.inspect("el.innerHTML = data;") is not None
    assert rule.inspect("el.innerHTML += data;") is not None
    assert rule.inspect("document.write(data);") is not None
    assert rule.inspect("el.insertAdjacentHTML('beforeend', data);") is not None
    assert rule.inspect("if (el.innerHTML === '') {}") is None
    assert rule.inspect("el.textContent = data;") is None


def test_loop_length_lookup_is_a_suggestion() -> None:
    finding = LoopLengthLookupRule().inspect("for (let i = 0; i < items.length; i++) {}")
    assert finding is not None
    assert finding.severity == "suggestion"
    assert LoopLengthLookupRule().inspect("for (const item of items) {}") is None


def test_timer_and_listener_cleanup() -> None:
    assert IntervalWithoutClearRule().inspect("setInterval(tick, 1000);") is not None
    assert (
        IntervalWithoutClearRule().inspect("const id = setInterval(tick, 10); clearInterval(id);")
        is None
    )
    listener = ListenerWithoutRemovalRule().inspect("btn.addEventListener('click', go);")
    assert listener is not None
    assert listener.severity == "suggestion"
    assert (
        ListenerWithoutRemovalRule().inspect(
            "btn.addEventListener('click', go); btn.removeEventListener('click', go);"
        )
        is None
    )


def test_long_lines_reported_once_with_count() -> None:
    text = "\n".join(["x" * 121, "short", "y" * 150])
    finding = LongLinesRule().inspect(text)
    assert finding is not None
    assert finding.message.startswith("2 line(s) exceed 120 characters")
    assert LongLinesRule().inspect("z" * 120) is None


def test_common_mistakes() -> None:
    assert ConsoleLogCallRule().inspect("console.log 'hi'") is not None
    assert ConsoleLogCallRule().inspect("console.log ('hi')") is None
    assert ConstWithoutInitRule().inspect("const x;") is not None
    assert ConstWithoutInitRule().inspect("const x = 1;") is None
    assert EmptyIfRule().inspect("if (ready);") is not None
    assert EmptyFunctionRule().inspect("function noop() {}") is not None
    assert EmptyFunctionRule().inspect("function f() { return 1; }") is None


def test_use_strict_only_suggested_for_longer_snippets() -> None:
    long_text = "let total = 0;\n" * 8
    assert len(long_text) > 100
    assert MissingUseStrictRule().inspect(long_text) is not None
    assert MissingUseStrictRule().inspect('"use strict";\n' + long_text) is None
    assert MissingUseStrictRule().inspect("let x = 1;") is None
