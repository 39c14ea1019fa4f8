"""
Models for AI-generated suggestions.

Two shapes live here:
- AnalysisResult / AISuggestionEntry: what the generator's local (no-network)
  analysis returns, and what the builder consumes.
- The decode result of a model response, expressed as an explicit sum type:
  ParsedSuggestions on success, ParseFailure otherwise. Callers branch on the
  type instead of relying on a catch-all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from .suggestion import SuggestionScope


class AISuggestionEntry(BaseModel):
    """One suggestion proposed by the model or by the local fallback analysis."""

    original_code: str = Field(min_length=1)
    suggested_code: str
    explanation: str
    scope: SuggestionScope = SuggestionScope.SINGLE_LINE
    # Empty means "use the caller-supplied default paths"
    file_paths: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Container returned by the local analysis entry point."""

    suggestions: List[AISuggestionEntry] = Field(default_factory=list)


class ModelSuggestionItem(BaseModel):
    """Wire shape of a single entry in the model's JSON response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    original_code: StrictStr = Field(alias="originalCode", min_length=1)
    suggested_code: StrictStr = Field(alias="suggestedCode")
    explanation: StrictStr
    scope: Optional[object] = None

    def to_entry(self) -> AISuggestionEntry:
        """Convert to an entry, coercing an unknown or missing scope to single_line."""
        scope = SuggestionScope.SINGLE_LINE
        if isinstance(self.scope, str):
            try:
                scope = SuggestionScope(self.scope)
            except ValueError:
                scope = SuggestionScope.SINGLE_LINE
        return AISuggestionEntry(
            original_code=self.original_code,
            suggested_code=self.suggested_code,
            explanation=self.explanation,
            scope=scope,
        )


@dataclass(frozen=True)
class ParsedSuggestions:
    """Successful decode. `dropped` counts entries rejected by validation."""
    entries: List[AISuggestionEntry] = field(default_factory=list)
    dropped: int = 0


@dataclass(frozen=True)
class ParseFailure:
    """The response could not be decoded into a suggestions payload."""
    reason: str
    raw: str = ""


ParseOutcome = Union[ParsedSuggestions, ParseFailure]
