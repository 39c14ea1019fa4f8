"""
Tests for LLMService, the AbstractCore-backed model provider.

AbstractCore's `create_llm` is patched so no provider is contacted.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from backend.app.services.llm_service import LLMError, LLMService, ProviderResponse


def _service_with(llm):
    with patch("backend.app.services.llm_service.create_llm", return_value=llm):
        return LLMService(provider="ollama", model="qwen3:4b", base_url="")


@pytest.mark.asyncio
async def test_complete_splits_system_and_user_messages():
    llm = MagicMock()
    llm.agenerate = AsyncMock(return_value=MagicMock(content='{"suggestions": []}'))
    service = _service_with(llm)

    response = await service.complete(
        [{"role": "system", "content": "Return JSON."}, {"role": "user", "content": "File: a.js"}],
        {"temperature": 0.3, "max_tokens": 2048},
    )

    assert response == ProviderResponse(content='{"suggestions": []}')
    args, kwargs = llm.agenerate.call_args
    assert args == ("File: a.js",)
    assert kwargs["system_prompt"] == "Return JSON."
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 2048


@pytest.mark.asyncio
async def test_unavailable_llm_raises_llm_error():
    with patch("backend.app.services.llm_service.create_llm", side_effect=RuntimeError("no server")):
        service = LLMService(provider="ollama", model="qwen3:4b", base_url="")

    assert service.available is False
    with pytest.raises(LLMError):
        await service.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_empty_content_becomes_empty_string():
    llm = MagicMock()
    llm.agenerate = AsyncMock(return_value=MagicMock(content=None))
    service = _service_with(llm)

    response = await service.complete([{"role": "user", "content": "hi"}])

    assert response.content == ""
