"""
Rule violation models (deterministic static-rule findings).

A violation is transient: it is produced and consumed within one detection call
and is converted into exactly one Suggestion draft by the builder.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class RuleSeverity(str, Enum):
    """Severity level for rule findings."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleViolation(BaseModel):
    """A single finding reported by the static rule engine."""

    # 1-based line number / 0-based column offset
    line: int
    column: int = 0

    # Stable identifier, e.g. "js/no-var" or "liquid/missing-alt"
    rule: str
    message: str

    # Trimmed source line the finding is anchored to, and its proposed replacement
    original_code: str
    suggested_code: str

    severity: RuleSeverity = RuleSeverity.WARNING
