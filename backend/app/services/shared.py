"""
Shared service instances to ensure consistency across API endpoints.

Stores are built once from the configured workspace and injected into the
application service; every endpoint goes through these instances.
"""

from typing import Optional

from ..config import config
from .ai_suggestion_generator import AISuggestionGenerator
from .static_rule_engine import StaticRuleEngine
from .suggestion_application_service import SuggestionApplicationService
from .suggestion_store import JsonFileStore, JsonSuggestionStore

workspace_dir = config.get_workspace_root()
file_store = JsonFileStore(workspace_dir)
suggestion_store = JsonSuggestionStore(workspace_dir)

rule_engine = StaticRuleEngine()
application_service = SuggestionApplicationService(suggestion_store, file_store)

_ai_generator: Optional[AISuggestionGenerator] = None


def get_ai_generator() -> AISuggestionGenerator:
    """Create the AI generator on first use so importing the API never touches the provider."""
    global _ai_generator
    if _ai_generator is None:
        _ai_generator = AISuggestionGenerator()
    return _ai_generator


__all__ = [
    "file_store",
    "suggestion_store",
    "rule_engine",
    "application_service",
    "get_ai_generator",
]
