"""
AI suggestion generator.

Two entry points:
- generate_suggestions(): asks the model provider for improvement suggestions.
  It never raises: timeout, provider errors and undecodable responses all
  resolve to an empty list so the authoring flow degrades gracefully.
- analyze_file_content(): a synchronous local pass that spots obvious patterns
  with no network call, usable before or instead of the model round trip.
"""

import asyncio
import json
import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from ..models.ai_suggestion import (
    AISuggestionEntry,
    AnalysisResult,
    ModelSuggestionItem,
    ParsedSuggestions,
    ParseFailure,
    ParseOutcome,
)
from ..models.suggestion import Suggestion, SuggestionScope, SuggestionSource, SuggestionStatus
from .file_types import CSS, JAVASCRIPT, LIQUID, normalize_type
from .llm_service import ModelProvider

logger = logging.getLogger(__name__)

DEFAULT_AI_TIMEOUT_S = 10.0
DEFAULT_MAX_RESULTS = 5
COMPLETION_OPTIONS = {"temperature": 0.3, "max_tokens": 2048}

_FENCE_RE = re.compile(r"^```[A-Za-z0-9_-]*\s*\n?(?P<body>.*?)\n?```\s*$", re.DOTALL)


def build_system_prompt(max_results: int = DEFAULT_MAX_RESULTS) -> str:
    return "\n".join([
        'You are a senior code reviewer. Analyze the provided file and return a JSON object',
        'with an array called "suggestions". Each suggestion must have exactly these fields:',
        '  "originalCode"  - the problematic snippet (verbatim from the file)',
        '  "suggestedCode" - the improved replacement',
        '  "explanation"   - why the change helps',
        '  "scope"         - one of "single_line" | "multi_line" | "multi_file"',
        'Return ONLY valid JSON, no markdown fences or extra text.',
        f'Limit output to the top {max_results} most impactful suggestions.',
    ])


def build_user_prompt(file_name: str, file_type: str, content: str) -> str:
    return "\n".join([
        f"File: {file_name} ({file_type})",
        "---",
        content,
        "---",
        "Identify improvement opportunities: performance, readability, security, best practices.",
    ])


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence (``` or ```json) if present."""
    text = (raw or "").strip()
    m = _FENCE_RE.match(text)
    if m:
        return m.group("body").strip()
    return text


def parse_model_response(raw: str, max_results: Optional[int] = None) -> ParseOutcome:
    """
    Decode a model response into suggestion entries.

    Entries missing any required string field are dropped individually; an
    invalid or missing scope is coerced to single_line. Anything that is not a
    JSON object with a `suggestions` array is a ParseFailure.
    """
    if not isinstance(raw, str):
        return ParseFailure(reason=f"expected text, got {type(raw).__name__}")

    text = strip_code_fences(raw)
    if not text:
        return ParseFailure(reason="empty response", raw=raw or "")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        return ParseFailure(reason=f"invalid JSON: {e.msg}", raw=raw)

    if not isinstance(payload, dict) or not isinstance(payload.get("suggestions"), list):
        return ParseFailure(reason="missing 'suggestions' array", raw=raw)

    entries: List[AISuggestionEntry] = []
    dropped = 0
    for item in payload["suggestions"]:
        if not isinstance(item, dict):
            dropped += 1
            continue
        try:
            entries.append(ModelSuggestionItem.model_validate(item).to_entry())
        except ValidationError:
            dropped += 1

    if max_results is not None and len(entries) > max_results:
        dropped += len(entries) - max_results
        entries = entries[:max_results]

    return ParsedSuggestions(entries=entries, dropped=dropped)


def _line_at(content: str, offset: int) -> str:
    start = content.rfind("\n", 0, offset) + 1
    end = content.find("\n", offset)
    if end == -1:
        end = len(content)
    return content[start:end].strip()


class AISuggestionGenerator:
    """Generates code-improvement suggestions through an injected model provider."""

    _CONSOLE_RE = re.compile(r"\bconsole\.log\s*\(")
    _VAR_RE = re.compile(r"\bvar\s+\w+")
    _LOOSE_EQ_RE = re.compile(r"(?<![!=])==(?!=)")
    _IMPORTANT_RE = re.compile(r"!important")
    _LIQUID_BLOCK_TAG_RE = re.compile(
        r"(?P<close>\{%-?\s*end(?:if|unless)\s*-?%\})|(?P<open>\{%-?\s*(?:if|unless)\b)"
    )

    def __init__(self, provider: Optional[ModelProvider] = None,
                 timeout_s: Optional[float] = None, max_results: Optional[int] = None):
        if timeout_s is None or max_results is None:
            from ..config import config
            timeout_s = config.get_ai_timeout() if timeout_s is None else timeout_s
            max_results = config.get_max_ai_results() if max_results is None else max_results

        self._provider = provider
        self.timeout_s = timeout_s
        self.max_results = max_results

    @property
    def provider(self) -> ModelProvider:
        """The model provider; the default LLMService is only built on first use."""
        if self._provider is None:
            from .llm_service import LLMService
            self._provider = LLMService()
        return self._provider

    async def generate_suggestions(
        self,
        file_name: str,
        content: str,
        file_type: str,
        project_id: str,
        user_id: str = "",
    ) -> List[Suggestion]:
        """
        Ask the model for suggestions on one file.

        Returns pending `ai_model` suggestions stamped with `project_id`, or an
        empty list on timeout, provider error or an undecodable response.
        """
        messages = [
            {"role": "system", "content": build_system_prompt(self.max_results)},
            {"role": "user", "content": build_user_prompt(file_name, file_type, content)},
        ]

        try:
            # Shielded: on timeout the provider call is abandoned, not cancelled.
            task = asyncio.ensure_future(self.provider.complete(messages, dict(COMPLETION_OPTIONS)))
            task.add_done_callback(_consume_abandoned_result)
            response = await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ AI suggestion generation timed out after {self.timeout_s}s for {file_name}")
            return []
        except Exception as e:
            logger.error(f"AI suggestion generation failed for {file_name}: {e}")
            return []

        outcome = parse_model_response(getattr(response, "content", ""), self.max_results)
        if isinstance(outcome, ParseFailure):
            logger.error(f"Could not decode AI suggestions for {file_name}: {outcome.reason}")
            return []

        if outcome.dropped:
            logger.info(f"Dropped {outcome.dropped} invalid AI suggestion(s) for {file_name}")

        return [
            Suggestion(
                user_id=user_id,
                project_id=project_id,
                source=SuggestionSource.AI_MODEL,
                scope=entry.scope,
                status=SuggestionStatus.PENDING,
                file_paths=[file_name],
                original_code=entry.original_code,
                suggested_code=entry.suggested_code,
                explanation=entry.explanation,
            )
            for entry in outcome.entries
        ]

    def analyze_file_content(self, content: str, file_type: str) -> AnalysisResult:
        """Lightweight synchronous analysis; never calls the model."""
        suggestions: List[AISuggestionEntry] = []
        category = normalize_type(file_type)
        content = content or ""

        if category == JAVASCRIPT:
            self._detect_js_patterns(content, suggestions)
        elif category == CSS:
            self._detect_css_patterns(content, suggestions)
        elif category == LIQUID:
            self._detect_liquid_patterns(content, suggestions)

        return AnalysisResult(suggestions=suggestions)

    def _detect_js_patterns(self, content: str, out: List[AISuggestionEntry]) -> None:
        for m in self._CONSOLE_RE.finditer(content):
            out.append(AISuggestionEntry(
                original_code=_line_at(content, m.start()),
                suggested_code="// Remove or replace with a proper logger",
                explanation="console.log found; should be removed before production",
            ))

        for m in self._VAR_RE.finditer(content):
            line = _line_at(content, m.start())
            out.append(AISuggestionEntry(
                original_code=line,
                suggested_code=re.sub(r"\bvar\b", "const", line, count=1),
                explanation='"var" is function-scoped and can cause bugs; prefer const/let',
            ))

        for m in self._LOOSE_EQ_RE.finditer(content):
            line = _line_at(content, m.start())
            out.append(AISuggestionEntry(
                original_code=line,
                suggested_code=self._LOOSE_EQ_RE.sub("===", line),
                explanation="Loose equality (==) can cause unexpected type coercion; use ===",
            ))

    def _detect_css_patterns(self, content: str, out: List[AISuggestionEntry]) -> None:
        for m in self._IMPORTANT_RE.finditer(content):
            line = _line_at(content, m.start())
            out.append(AISuggestionEntry(
                original_code=line,
                suggested_code=re.sub(r"\s*!important", "", line),
                explanation="!important overrides the cascade; prefer increasing specificity",
            ))

    def _detect_liquid_patterns(self, content: str, out: List[AISuggestionEntry]) -> None:
        depth = 0
        for line in content.split("\n"):
            deepest = 0
            for m in self._LIQUID_BLOCK_TAG_RE.finditer(line):
                if m.group("close"):
                    depth = max(0, depth - 1)
                else:
                    depth += 1
                    deepest = max(deepest, depth)
            if deepest > 3:
                out.append(AISuggestionEntry(
                    original_code=line.strip(),
                    suggested_code="Extract nested conditions into assign variables or use case/when",
                    explanation=f"Deeply nested conditional (level {deepest}); consider simplifying",
                    scope=SuggestionScope.MULTI_LINE,
                ))


def _consume_abandoned_result(task: "asyncio.Future[Any]") -> None:
    # Retrieve the exception of an abandoned call so asyncio does not report it as unhandled.
    if not task.cancelled():
        task.exception()
