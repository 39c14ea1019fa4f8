"""Services for the Code Suggest engine."""

from .static_rule_engine import StaticRuleEngine
from .ai_suggestion_generator import AISuggestionGenerator
from .suggestion_builder import SuggestionBuilder
from .suggestion_application_service import SuggestionApplicationService

__all__ = [
    "StaticRuleEngine",
    "AISuggestionGenerator",
    "SuggestionBuilder",
    "SuggestionApplicationService"
]
