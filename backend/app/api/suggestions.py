"""
Suggestion API endpoints.

Produces drafts from the static rule engine and the AI generator, persists
them as pending, and exposes the apply / reject / undo lifecycle.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..models.ai_suggestion import AnalysisResult
from ..models.linting import RuleViolation
from ..models.suggestion import ApplicationResult, Suggestion, SuggestionStatus
from ..services.ai_suggestion_generator import AISuggestionGenerator
from ..services.static_rule_engine import StaticRuleEngine
from ..services.suggestion_application_service import (
    InvalidSuggestionStateError,
    SuggestionApplicationService,
    SuggestionConflictError,
    SuggestionError,
    SuggestionFileNotFoundError,
    SuggestionNotFoundError,
)
from ..services.suggestion_builder import SuggestionBuilder

logger = logging.getLogger(__name__)

router = APIRouter()


class AnalyzeRequest(BaseModel):
    """File submitted for suggestion generation."""
    project_id: str
    user_id: str = ""
    file_path: str
    file_type: str = ""
    content: str


class AnalyzeResponse(BaseModel):
    """Persisted drafts together with the raw rule findings they came from."""
    suggestions: List[Suggestion]
    violations: List[RuleViolation] = []


class ApplyRequest(BaseModel):
    edited_code: Optional[str] = None


# Dependencies resolve lazily so importing this module does not build stores.

def get_application_service() -> SuggestionApplicationService:
    from ..services.shared import application_service
    return application_service


def get_rule_engine() -> StaticRuleEngine:
    from ..services.shared import rule_engine
    return rule_engine


def get_ai_generator() -> AISuggestionGenerator:
    from ..services.shared import get_ai_generator as _get
    return _get()


def _to_http_error(e: SuggestionError) -> HTTPException:
    if isinstance(e, (SuggestionNotFoundError, SuggestionFileNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidSuggestionStateError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, SuggestionConflictError):
        return HTTPException(
            status_code=409,
            detail={"message": str(e), "current_content": e.current_content},
        )
    return HTTPException(status_code=400, detail=str(e))


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_file(
    request: AnalyzeRequest,
    engine: StaticRuleEngine = Depends(get_rule_engine),
    service: SuggestionApplicationService = Depends(get_application_service),
):
    """Run the static rule engine and persist one pending suggestion per violation."""
    violations = engine.analyze_file(request.content, request.file_type, request.file_path)
    drafts = SuggestionBuilder.from_rule_violations(
        violations, request.user_id, request.project_id, request.file_path
    )
    stored = service.persist_drafts(drafts)
    logger.info(f"🔎 {len(violations)} rule violation(s) in {request.file_path}")
    return AnalyzeResponse(suggestions=stored, violations=violations)


@router.post("/heuristics", response_model=AnalysisResult)
async def analyze_locally(
    request: AnalyzeRequest,
    generator: AISuggestionGenerator = Depends(get_ai_generator),
):
    """Zero-latency local analysis; nothing is persisted."""
    return generator.analyze_file_content(request.content, request.file_type)


@router.post("/generate", response_model=AnalyzeResponse)
async def generate_ai_suggestions(
    request: AnalyzeRequest,
    generator: AISuggestionGenerator = Depends(get_ai_generator),
    service: SuggestionApplicationService = Depends(get_application_service),
):
    """Ask the model for suggestions; an unavailable model yields an empty list."""
    drafts = await generator.generate_suggestions(
        request.file_path,
        request.content,
        request.file_type,
        request.project_id,
        user_id=request.user_id,
    )
    stored = service.persist_drafts(drafts)
    return AnalyzeResponse(suggestions=stored)


@router.get("", response_model=List[Suggestion])
async def list_suggestions(
    project_id: str = Query(..., description="Project to list suggestions for"),
    status: Optional[SuggestionStatus] = Query(None, description="Filter by status"),
    limit: Optional[int] = Query(None, ge=1),
    offset: Optional[int] = Query(None, ge=0),
    service: SuggestionApplicationService = Depends(get_application_service),
):
    """List suggestions newest-first."""
    return service.list_suggestions(project_id, status=status, limit=limit, offset=offset)


@router.get("/{suggestion_id}", response_model=Suggestion)
async def get_suggestion(
    suggestion_id: str,
    service: SuggestionApplicationService = Depends(get_application_service),
):
    suggestion = service.get_suggestion(suggestion_id)
    if suggestion is None:
        raise HTTPException(status_code=404, detail=f"Suggestion {suggestion_id} not found")
    return suggestion


@router.post("/{suggestion_id}/apply", response_model=ApplicationResult)
async def apply_suggestion(
    suggestion_id: str,
    request: Optional[ApplyRequest] = None,
    service: SuggestionApplicationService = Depends(get_application_service),
):
    """
    Apply a suggestion. A conflict is not an HTTP error: the response carries
    `success=false` and the current content for the client to resolve.
    """
    edited_code = request.edited_code if request else None
    try:
        return service.apply_suggestion(suggestion_id, edited_code=edited_code)
    except SuggestionError as e:
        raise _to_http_error(e)


@router.post("/{suggestion_id}/reject", response_model=Suggestion)
async def reject_suggestion(
    suggestion_id: str,
    service: SuggestionApplicationService = Depends(get_application_service),
):
    try:
        return service.reject_suggestion(suggestion_id)
    except SuggestionError as e:
        raise _to_http_error(e)


@router.post("/{suggestion_id}/undo", response_model=Suggestion)
async def undo_suggestion(
    suggestion_id: str,
    service: SuggestionApplicationService = Depends(get_application_service),
):
    try:
        return service.undo_suggestion(suggestion_id)
    except SuggestionError as e:
        raise _to_http_error(e)
