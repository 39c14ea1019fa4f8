"""
System information API endpoints.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from .._version import __version__, __release_date__
from ..config import config

router = APIRouter()


class VersionResponse(BaseModel):
    """Response model for version information."""
    version: str
    release_date: str


class SuggestionSettingsResponse(BaseModel):
    """Effective suggestion-generation settings."""
    llm_provider: str
    llm_model: str
    ai_timeout_s: float
    max_ai_results: int


@router.get("/version", response_model=VersionResponse)
async def get_version():
    """
    Get the current backend version and release date.

    Returns:
        VersionResponse: Current version information including release date
    """
    return VersionResponse(version=__version__, release_date=__release_date__)


@router.get("/settings", response_model=SuggestionSettingsResponse)
async def get_settings():
    """Report the configuration the AI generator runs with (ENV > config.json > defaults)."""
    return SuggestionSettingsResponse(
        llm_provider=config.get_llm_provider(),
        llm_model=config.get_llm_model(),
        ai_timeout_s=config.get_ai_timeout(),
        max_ai_results=config.get_max_ai_results(),
    )
