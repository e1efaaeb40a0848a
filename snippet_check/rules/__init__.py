"""Rules package."""

from collections.abc import Callable
from dataclasses import dataclass

from snippet_check.rules.base import Finding, Rule, Severity
from snippet_check.rules.css import CSS_RULES
from snippet_check.rules.html import HTML_RULES, MissingDoctypeRule, MissingHtmlTagRule
from snippet_check.rules.javascript import JAVASCRIPT_RULES
from snippet_check.rules.python import PYTHON_RULES

__all__ = [
    "RULE_SETS",
    "Finding",
    "Rule",
    "RuleInfo",
    "build_rules",
    "known_rule_ids",
    "list_rule_info",
]

RULE_SETS: dict[str, tuple[type, ...]] = {
    "javascript": JAVASCRIPT_RULES,
    "python": PYTHON_RULES,
    "html": HTML_RULES,
    "css": CSS_RULES,
}

_STRICT_CAPABLE = (MissingDoctypeRule, MissingHtmlTagRule)


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    language: str
    severity: Severity


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[], Rule]
    name: str
    description: str
    language: str
    severity: Severity


def build_rules(
    language: str | None,
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    html_strict: bool = False,
) -> list[Rule]:
    """Build the ordered rule set for a canonical language name.

    Rule ids belonging to other languages are accepted and ignored so one
    config file can tune every language; unknown ids raise ``ValueError``.
    """
    known = known_rule_ids()
    requested_ids = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])
    unknown = [rule_id for rule_id in requested_ids if rule_id not in known]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    if language is None or language not in RULE_SETS:
        return []

    enabled_set = set(enabled_rule_ids) if enabled_rule_ids is not None else None
    disabled_set = set(disabled_rule_ids or [])
    built: list[Rule] = []
    for spec in _language_rule_specs(language, html_strict=html_strict):
        if enabled_set is not None and spec.rule_id not in enabled_set:
            continue
        if spec.rule_id in disabled_set:
            continue
        built.append(spec.factory())
    return built


def list_rule_info(language: str | None = None, *, html_strict: bool = False) -> list[RuleInfo]:
    """Return metadata for all known rules, optionally for one language."""
    languages = [language] if language is not None else list(RULE_SETS)
    info: list[RuleInfo] = []
    for name in languages:
        if name not in RULE_SETS:
            continue
        for spec in _language_rule_specs(name, html_strict=html_strict):
            info.append(
                RuleInfo(
                    rule_id=spec.rule_id,
                    name=spec.name,
                    description=spec.description,
                    language=spec.language,
                    severity=spec.severity,
                )
            )
    return info


def known_rule_ids() -> set[str]:
    """Return every rule id across all languages."""
    return {
        spec.rule_id
        for language in RULE_SETS
        for spec in _language_rule_specs(language, html_strict=False)
    }


def _language_rule_specs(language: str, *, html_strict: bool) -> list[_RuleSpec]:
    return [
        _spec(rule_cls, language=language, strict=html_strict)
        for rule_cls in RULE_SETS[language]
    ]


def _spec(rule_cls: type, *, language: str, strict: bool) -> _RuleSpec:
    factory: Callable[[], Rule] = rule_cls
    if issubclass(rule_cls, _STRICT_CAPABLE):
        factory = lambda: rule_cls(strict=strict)  # noqa: E731
    instance = factory()
    return _RuleSpec(
        rule_id=instance.rule_id,
        factory=factory,
        name=rule_cls.__name__,
        description=(rule_cls.__doc__ or "").strip(),
        language=language,
        severity=instance.severity,
    )
