"""
Tests for SuggestionBuilder: detector output -> pending Suggestion drafts.
"""

from backend.app.models.ai_suggestion import AISuggestionEntry, AnalysisResult
from backend.app.models.linting import RuleSeverity, RuleViolation
from backend.app.models.suggestion import SuggestionScope, SuggestionSource, SuggestionStatus
from backend.app.services.static_rule_engine import StaticRuleEngine
from backend.app.services.suggestion_builder import SuggestionBuilder


def _violation(**overrides):
    data = dict(
        line=3,
        column=0,
        rule="js/no-var",
        message="'var' is function-scoped",
        original_code="var x = 1;",
        suggested_code="const x = 1;",
        severity=RuleSeverity.WARNING,
    )
    data.update(overrides)
    return RuleViolation(**data)


def test_rule_violation_becomes_single_line_static_draft():
    draft = SuggestionBuilder.from_rule_violation(_violation(), "user-1", "proj-1", "src/app.js")

    assert draft.source == SuggestionSource.STATIC_RULE
    assert draft.scope == SuggestionScope.SINGLE_LINE
    assert draft.status == SuggestionStatus.PENDING
    assert draft.applied_code is None
    assert draft.applied_at is None and draft.rejected_at is None
    assert draft.file_paths == ["src/app.js"]
    assert draft.original_code == "var x = 1;"
    assert draft.suggested_code == "const x = 1;"
    assert draft.user_id == "user-1" and draft.project_id == "proj-1"


def test_rule_explanation_keeps_rule_id():
    draft = SuggestionBuilder.from_rule_violation(_violation(), "u", "p", "a.js")
    assert draft.explanation == "[js/no-var] 'var' is function-scoped"


def test_multiline_tag_violation_still_single_line_scope():
    violation = _violation(rule="liquid/missing-alt", original_code='<img\n  src="a.png">',
                           suggested_code='<img alt=""\n  src="a.png">', severity=RuleSeverity.ERROR)
    draft = SuggestionBuilder.from_rule_violation(violation, "u", "p", "a.liquid")
    assert draft.scope == SuggestionScope.SINGLE_LINE


def test_one_draft_per_violation_from_engine():
    violations = StaticRuleEngine().analyze_file("var x = 1;\nconsole.log(x);", "javascript", "app.js")
    drafts = SuggestionBuilder.from_rule_violations(violations, "u", "p", "app.js")
    assert len(drafts) == len(violations) == 2
    assert len({d.id for d in drafts}) == 2


def test_ai_entries_use_own_paths_or_default():
    result = AnalysisResult(suggestions=[
        AISuggestionEntry(original_code="a", suggested_code="b", explanation="own paths",
                          scope=SuggestionScope.MULTI_FILE, file_paths=["x.js", "y.js"]),
        AISuggestionEntry(original_code="c", suggested_code="d", explanation="default paths"),
    ])

    drafts = SuggestionBuilder.from_ai_result(result, "u", "p", ["default.js"])

    assert [d.file_paths for d in drafts] == [["x.js", "y.js"], ["default.js"]]
    assert drafts[0].scope == SuggestionScope.MULTI_FILE
    assert all(d.source == SuggestionSource.AI_MODEL for d in drafts)
    assert all(d.status == SuggestionStatus.PENDING and d.applied_code is None for d in drafts)


def test_empty_ai_result_builds_nothing():
    assert SuggestionBuilder.from_ai_result(AnalysisResult(), "u", "p", ["a.js"]) == []
