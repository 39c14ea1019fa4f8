"""
Suggestion models for the Code Suggest engine.

A Suggestion is the persisted, user-facing unit of a proposed code change.
It is created as a `pending` draft (by the SuggestionBuilder) and then moves
through exactly one lifecycle branch:

    pending -> applied | edited -> undone
    pending -> rejected

`rejected` and `undone` are terminal. Nothing transitions back into `pending`.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class SuggestionSource(str, Enum):
    """Detection path that produced a suggestion."""
    AI_MODEL = "ai_model"        # Generative model round trip
    STATIC_RULE = "static_rule"  # Deterministic pattern rule
    HYBRID = "hybrid"            # Rule finding refined by the model


class SuggestionScope(str, Enum):
    """How much code a suggestion claims to touch."""
    SINGLE_LINE = "single_line"
    MULTI_LINE = "multi_line"
    MULTI_FILE = "multi_file"


class SuggestionStatus(str, Enum):
    """Lifecycle status of a suggestion."""
    PENDING = "pending"    # Awaiting a user decision
    APPLIED = "applied"    # Suggested code written to the file as-is
    EDITED = "edited"      # User-edited code written to the file
    REJECTED = "rejected"  # Dismissed; terminal
    UNDONE = "undone"      # Applied then reverted; terminal


# Legal transitions of the suggestion state machine
ALLOWED_TRANSITIONS: Dict[SuggestionStatus, FrozenSet[SuggestionStatus]] = {
    SuggestionStatus.PENDING: frozenset(
        {SuggestionStatus.APPLIED, SuggestionStatus.EDITED, SuggestionStatus.REJECTED}
    ),
    SuggestionStatus.APPLIED: frozenset({SuggestionStatus.UNDONE}),
    SuggestionStatus.EDITED: frozenset({SuggestionStatus.UNDONE}),
    SuggestionStatus.REJECTED: frozenset(),
    SuggestionStatus.UNDONE: frozenset(),
}


def can_transition(current: SuggestionStatus, target: SuggestionStatus) -> bool:
    """Return True when `current -> target` is a legal lifecycle move."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class Suggestion(BaseModel):
    """A proposed code change with its approval lifecycle."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str = ""
    project_id: str = ""

    source: SuggestionSource
    scope: SuggestionScope = SuggestionScope.SINGLE_LINE
    status: SuggestionStatus = SuggestionStatus.PENDING

    # Ordered target paths; only the first one is mutated on apply/undo
    file_paths: List[str] = Field(min_length=1)

    # Verbatim anchor text expected in the target file
    original_code: str = Field(min_length=1)
    suggested_code: str
    # Exact text that replaced original_code; set by the apply transition
    applied_code: Optional[str] = None
    explanation: str = ""

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    applied_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None


class ConflictInfo(BaseModel):
    """Payload returned when a suggestion's anchor text is gone from the file."""
    current_content: str
    suggested_content: str


class ApplicationResult(BaseModel):
    """Outcome of an apply attempt: success, or a conflict with no mutation."""
    success: bool
    suggestion: Suggestion
    conflict: Optional[ConflictInfo] = None
