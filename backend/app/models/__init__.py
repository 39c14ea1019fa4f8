"""Data models for the Code Suggest engine."""

from .linting import RuleSeverity, RuleViolation
from .suggestion import (
    ApplicationResult,
    ConflictInfo,
    Suggestion,
    SuggestionScope,
    SuggestionSource,
    SuggestionStatus,
)
from .ai_suggestion import AISuggestionEntry, AnalysisResult, ParsedSuggestions, ParseFailure

__all__ = [
    "RuleSeverity",
    "RuleViolation",
    "ApplicationResult",
    "ConflictInfo",
    "Suggestion",
    "SuggestionScope",
    "SuggestionSource",
    "SuggestionStatus",
    "AISuggestionEntry",
    "AnalysisResult",
    "ParsedSuggestions",
    "ParseFailure",
]
