"""Configuration loading for snippet-check."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from snippet_check.probe import DEFAULT_TIMEOUT_SECONDS

CONFIG_FILENAMES = (".snippet-check.toml", "snippet-check.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("snippet_check", "snippet-check")

FORMATS = {"human", "json"}
VARIANTS = {"scored", "summary"}


@dataclass(slots=True)
class ProbeConfig:
    """Dynamic probe defaults."""

    enabled: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    node_binary: str = "node"

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "timeout_seconds": self.timeout_seconds,
            "node_binary": self.node_binary,
        }


@dataclass(slots=True)
class HtmlConfig:
    """HTML rule policy."""

    strict: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"strict": self.strict}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    variant: str = "scored"
    fail_under: int | None = None
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    html: HtmlConfig = field(default_factory=HtmlConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "variant": self.variant,
            "fail_under": self.fail_under,
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "html": self.html.to_dict(),
            "probe": self.probe.to_dict(),
            "source": self.source,
        }


def load_app_config(root: Path, config_path: Path | None = None) -> AppConfig:
    """Resolve config from ``--config``, the project's config files, or pyproject."""
    root = root.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (root / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        return _from_mapping(_config_table(resolved), source=str(resolved))

    for filename in (*CONFIG_FILENAMES, PYPROJECT_FILENAME):
        candidate = root / filename
        if not candidate.exists():
            continue
        table = _config_table(candidate)
        if table or filename != PYPROJECT_FILENAME:
            return _from_mapping(table, source=str(candidate))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            'variant = "scored"',
            "fail_under = 70",
            "",
            "[rules]",
            '# enable = ["js_unbalanced_braces", "js_dynamic_eval"]',
            'disable = ["js_missing_use_strict"]',
            "",
            "[html]",
            "# Treat missing DOCTYPE / <html> as errors instead of warnings.",
            "strict = false",
            "",
            "[probe]",
            "# Execute JavaScript snippets in a sandboxed node process.",
            "enabled = false",
            "timeout_seconds = 1.0",
            'node_binary = "node"',
            "",
        ]
    )


def _config_table(path: Path) -> dict[str, Any]:
    try:
        document = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if path.name != PYPROJECT_FILENAME:
        return document

    tool = document.get("tool")
    if isinstance(tool, dict):
        for key in PYPROJECT_TOOL_KEYS:
            if isinstance(tool.get(key), dict):
                return tool[key]
    return {}


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules = _expect(mapping.get("rules", {}), dict, "rules", "a table")
    html = _expect(mapping.get("html", {}), dict, "html", "a table")
    probe = _expect(mapping.get("probe", {}), dict, "probe", "a table")

    fail_under = mapping.get("fail_under")
    if fail_under is not None:
        _expect(fail_under, int, "fail_under", "an integer")
        if not 0 <= fail_under <= 100:
            raise ValueError("fail_under must be between 0 and 100")

    timeout = _expect(
        probe.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
        (int, float),
        "probe.timeout_seconds",
        "a number",
    )
    if timeout <= 0:
        raise ValueError("probe.timeout_seconds must be > 0")

    enable = rules.get("enable")
    return AppConfig(
        format=_choice(mapping.get("format", "human"), FORMATS, "format"),
        variant=_choice(mapping.get("variant", "scored"), VARIANTS, "variant"),
        fail_under=fail_under,
        rule_enable=None if enable is None else _rule_ids(enable, "rules.enable"),
        rule_disable=_rule_ids(rules.get("disable", []), "rules.disable"),
        html=HtmlConfig(
            strict=_expect(html.get("strict", False), bool, "html.strict", "a boolean")
        ),
        probe=ProbeConfig(
            enabled=_expect(probe.get("enabled", False), bool, "probe.enabled", "a boolean"),
            timeout_seconds=float(timeout),
            node_binary=_expect(
                probe.get("node_binary", "node"), str, "probe.node_binary", "a string"
            ),
        ),
        source=source,
    )


def _expect(value: Any, kind: type | tuple[type, ...], field_name: str, label: str) -> Any:
    # bool is an int subclass; accept it only where bool itself is asked for.
    bool_allowed = kind is bool or (isinstance(kind, tuple) and bool in kind)
    if not isinstance(value, kind) or (isinstance(value, bool) and not bool_allowed):
        raise ValueError(f"{field_name} must be {label}")
    return value


def _rule_ids(value: Any, field_name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{field_name} must be a list of rule ids")
    return list(value)


def _choice(value: Any, allowed: set[str], field_name: str) -> str:
    choice = str(value).lower()
    if choice not in allowed:
        raise ValueError(f"{field_name} must be one of: {', '.join(sorted(allowed))}")
    return choice
