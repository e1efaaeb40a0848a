"""HTML rule set."""

from __future__ import annotations

import re
from collections import Counter

from snippet_check.rules.base import Finding, Severity

VOID_TAGS = frozenset({"img", "br", "hr", "input", "meta", "link"})
HTML_TAG_MIN_LENGTH = 50

_OPEN_TAG = re.compile(r"<([A-Za-z][\w-]*)\b[^>]*>")
_CLOSE_TAG = re.compile(r"</([A-Za-z][\w-]*)\s*>")
_IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_ALT_ATTR = re.compile(r"\balt\s*=", re.IGNORECASE)


class _PresenceRule:
    """Reports when a required declaration is absent."""

    rule_id = ""
    pattern: re.Pattern[str] = re.compile(r"(?!)")
    message = ""

    def __init__(self, *, strict: bool = False) -> None:
        self.severity: Severity = "error" if strict else "warning"

    def applies(self, text: str) -> bool:
        return True

    def inspect(self, text: str) -> Finding | None:
        if not self.applies(text) or self.pattern.search(text) is not None:
            return None
        return Finding(rule_id=self.rule_id, severity=self.severity, message=self.message)


class MissingDoctypeRule(_PresenceRule):
    """Flags a missing `<!DOCTYPE html>` declaration."""

    rule_id = "html_missing_doctype"
    pattern = re.compile(r"<!doctype\s+html", re.IGNORECASE)
    message = "Missing DOCTYPE declaration"


class MissingHtmlTagRule(_PresenceRule):
    """Flags a missing `<html>` root element in non-trivial snippets."""

    rule_id = "html_missing_html_tag"
    pattern = re.compile(r"<html\b", re.IGNORECASE)
    message = "Missing <html> tag"

    def applies(self, text: str) -> bool:
        return len(text) > HTML_TAG_MIN_LENGTH


class MissingHeadRule(_PresenceRule):
    """Flags a missing `<head>` section."""

    rule_id = "html_missing_head"
    pattern = re.compile(r"<head\b", re.IGNORECASE)
    message = "Missing <head> section"


class MissingTitleRule(_PresenceRule):
    """Flags a missing `<title>` element."""

    rule_id = "html_missing_title"
    pattern = re.compile(r"<title\b", re.IGNORECASE)
    message = "Missing <title> element"


class MissingCharsetRule(_PresenceRule):
    """Flags a missing `<meta charset>` declaration."""

    rule_id = "html_missing_charset"
    pattern = re.compile(r"<meta\b[^>]*\bcharset\s*=", re.IGNORECASE)
    message = "Missing <meta charset> declaration"


class MissingViewportRule(_PresenceRule):
    """Flags a missing responsive viewport `<meta>` tag."""

    rule_id = "html_missing_viewport"
    pattern = re.compile(r"<meta\b[^>]*\bname\s*=\s*[\"']?viewport", re.IGNORECASE)
    message = "Missing viewport <meta> tag for responsive layouts"


class ImgWithoutAltRule:
    """Flags `<img>` elements without an `alt` attribute."""

    rule_id = "html_img_without_alt"
    severity: Severity = "warning"

    def inspect(self, text: str) -> Finding | None:
        missing = sum(1 for tag in _IMG_TAG.findall(text) if _ALT_ATTR.search(tag) is None)
        if missing == 0:
            return None
        return Finding(
            rule_id=self.rule_id,
            severity=self.severity,
            message=f"{missing} <img> tag(s) missing alt attribute",
        )


class UnclosedTagsRule:
    """Compares open and close counts per tag name, skipping void tags."""

    rule_id = "html_unclosed_tags"
    severity: Severity = "warning"

    def inspect(self, text: str) -> Finding | None:
        opened: Counter[str] = Counter()
        for match in _OPEN_TAG.finditer(text):
            name = match.group(1).lower()
            if name in VOID_TAGS or match.group(0).endswith("/>"):
                continue
            opened[name] += 1
        closed = Counter(name.lower() for name in _CLOSE_TAG.findall(text))

        problems: list[str] = []
        for name in dict.fromkeys([*opened, *closed]):
            if name in VOID_TAGS or opened[name] == closed[name]:
                continue
            if opened[name] > closed[name]:
                label = f"Unclosed <{name}> tag"
            else:
                label = f"Stray </{name}> tag"
            problems.append(f"{label}: {opened[name]} open, {closed[name]} close")

        if not problems:
            return None
        return Finding(rule_id=self.rule_id, severity=self.severity, message="; ".join(problems))


HTML_RULES = (
    MissingDoctypeRule,
    MissingHtmlTagRule,
    MissingHeadRule,
    MissingTitleRule,
    MissingCharsetRule,
    MissingViewportRule,
    ImgWithoutAltRule,
    UnclosedTagsRule,
)
