"""Base rule protocol and finding model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

Severity = Literal["error", "warning", "suggestion"]

SEVERITIES: tuple[Severity, ...] = ("error", "warning", "suggestion")


@dataclass(frozen=True, slots=True)
class Finding:
    """A single issue reported by a rule."""

    rule_id: str
    severity: Severity
    message: str


class Rule(Protocol):
    """Protocol for independent snippet checks."""

    rule_id: str
    severity: Severity

    def inspect(self, text: str) -> Finding | None:
        """Inspect raw snippet text and return at most one finding."""
