"""
Text replacement strategies used to apply and undo suggestions.

Applying a suggestion is deliberately a single first-occurrence substitution,
not a diff/patch. The strategy is injected into the application service so a
diff-based implementation can replace it without touching the state machine.
"""

from typing import Optional, Protocol


class ReplacementStrategy(Protocol):
    """Substitutes `old` with `new` in `content`; returns None when `old` is absent."""

    def replace(self, content: str, old: str, new: str) -> Optional[str]:
        ...


class ReplaceFirstOccurrence:
    """Replace only the first occurrence of the anchor text."""

    def replace(self, content: str, old: str, new: str) -> Optional[str]:
        if old not in content:
            return None
        return content.replace(old, new, 1)
