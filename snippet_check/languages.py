"""Language tag normalization and rule-set dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePath

from snippet_check.rules import build_rules
from snippet_check.rules.base import Rule

LANGUAGE_ALIASES: dict[str, str] = {
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "node": "javascript",
    "nodejs": "javascript",
    "python": "python",
    "py": "python",
    "python3": "python",
    "py3": "python",
    "html": "html",
    "htm": "html",
    "xhtml": "html",
    "css": "css",
}

PROBE_LANGUAGES = frozenset({"javascript"})

_SUFFIX_LANGUAGES = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
    ".css": "css",
}


@dataclass(slots=True)
class LanguagePlan:
    """Rules and probe eligibility selected for one language tag."""

    language: str | None
    rules: list[Rule] = field(default_factory=list)
    probe_applies: bool = False


def resolve_language(tag: str) -> str | None:
    """Map a free-form language tag to its canonical name, or None if unknown."""
    return LANGUAGE_ALIASES.get(tag.strip().lower())


def language_for_path(path: PurePath) -> str | None:
    """Guess a canonical language from a file suffix."""
    return _SUFFIX_LANGUAGES.get(path.suffix.lower())


def select_rules(
    tag: str,
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    html_strict: bool = False,
) -> LanguagePlan:
    """Select the rule set for a tag. Unknown tags fail open with no rules."""
    language = resolve_language(tag)
    return LanguagePlan(
        language=language,
        rules=build_rules(
            language,
            enabled_rule_ids=enabled_rule_ids,
            disabled_rule_ids=disabled_rule_ids,
            html_strict=html_strict,
        ),
        probe_applies=language in PROBE_LANGUAGES,
    )
