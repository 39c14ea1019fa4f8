"""
Suggestion builder: pure normalization of detector output into Suggestion drafts.

Both detection paths (AI analysis entries and static rule violations) end up as
`pending` suggestions with no applied code. No I/O happens here.
"""

from typing import Iterable, List

from ..models.ai_suggestion import AnalysisResult
from ..models.linting import RuleViolation
from ..models.suggestion import Suggestion, SuggestionScope, SuggestionSource, SuggestionStatus


class SuggestionBuilder:
    """Converts detector findings into persisted-shape Suggestion drafts."""

    @staticmethod
    def from_ai_result(
        result: AnalysisResult,
        user_id: str,
        project_id: str,
        file_paths: List[str],
    ) -> List[Suggestion]:
        """
        One draft per AI entry.

        An entry's own `file_paths` win when non-empty; otherwise the
        caller-supplied default paths are used.
        """
        drafts: List[Suggestion] = []
        for entry in result.suggestions:
            drafts.append(
                Suggestion(
                    user_id=user_id,
                    project_id=project_id,
                    source=SuggestionSource.AI_MODEL,
                    scope=entry.scope,
                    status=SuggestionStatus.PENDING,
                    file_paths=list(entry.file_paths) if entry.file_paths else list(file_paths),
                    original_code=entry.original_code,
                    suggested_code=entry.suggested_code,
                    applied_code=None,
                    explanation=entry.explanation,
                )
            )
        return drafts

    @staticmethod
    def from_rule_violation(
        violation: RuleViolation,
        user_id: str,
        project_id: str,
        file_path: str,
    ) -> Suggestion:
        """One draft per violation, always single_line, explanation tagged with the rule id."""
        return Suggestion(
            user_id=user_id,
            project_id=project_id,
            source=SuggestionSource.STATIC_RULE,
            scope=SuggestionScope.SINGLE_LINE,
            status=SuggestionStatus.PENDING,
            file_paths=[file_path],
            original_code=violation.original_code,
            suggested_code=violation.suggested_code,
            applied_code=None,
            explanation=f"[{violation.rule}] {violation.message}",
        )

    @classmethod
    def from_rule_violations(
        cls,
        violations: Iterable[RuleViolation],
        user_id: str,
        project_id: str,
        file_path: str,
    ) -> List[Suggestion]:
        return [cls.from_rule_violation(v, user_id, project_id, file_path) for v in violations]
