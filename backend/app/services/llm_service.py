"""
LLM Service: the model-provider boundary of the suggestion engine.

The AI suggestion generator only depends on the `ModelProvider` protocol
(`complete(messages, options) -> ProviderResponse`). `LLMService` is the
default implementation and uses AbstractCore to reach the configured provider
(OpenAI, Anthropic, Ollama, LMStudio, ...). Swapping providers means passing a
different object with the same `complete` coroutine.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from abstractcore import create_llm, ProviderAPIError, ModelNotFoundError, AuthenticationError


class LLMError(Exception):
    """General LLM error raised when the provider cannot produce a completion."""
    pass


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderResponse:
    """Text returned by a provider for one completion."""
    content: str


class ModelProvider(Protocol):
    """Minimal interface the suggestion generator needs from a model provider."""

    async def complete(
        self,
        messages: List[Dict[str, str]],
        options: Optional[Dict[str, Any]] = None,
    ) -> ProviderResponse:
        ...


class LLMService:
    """AbstractCore-backed ModelProvider."""

    def __init__(self, provider: Optional[str] = None, model: Optional[str] = None,
                 base_url: Optional[str] = None):
        """
        Initialize the LLM service.

        If provider/model not specified, will load from project config.

        Args:
            provider: LLM provider name (optional, will load from config if not provided)
            model: Model name (optional, will load from config if not provided)
            base_url: Base URL for local/self-hosted providers (optional)
        """
        if provider is None or model is None or base_url is None:
            from ..config import config
            self.provider = provider or config.get_llm_provider()
            self.model = model or config.get_llm_model()
            self.base_url = base_url or config.get_llm_base_url()
            logger.info(f"Loaded LLM config from file: {self.provider}/{self.model}")
        else:
            self.provider = provider
            self.model = model
            self.base_url = base_url

        self.llm = None
        self._initialize_llm()

    def _initialize_llm(self):
        """Initialize the LLM client; failures leave the service in a degraded state."""
        try:
            kwargs = {}
            if self.base_url:
                from abstractcore.config import configure_provider
                configure_provider(self.provider.lower(), base_url=self.base_url)
                kwargs["base_url"] = self.base_url
                logger.info(f"🔗 Using {self.provider} at: {self.base_url}")

            self.llm = create_llm(
                self.provider,
                model=self.model,
                **kwargs
            )
            logger.info(f"✅ Initialized LLM: {self.provider}/{self.model}")
        except (ProviderAPIError, ModelNotFoundError, AuthenticationError) as e:
            logger.error(f"❌ Failed to initialize LLM: {e}")
            self.llm = None
        except Exception as e:
            logger.error(f"❌ Unexpected error initializing LLM: {e}")
            self.llm = None

    @property
    def available(self) -> bool:
        return self.llm is not None

    async def complete(
        self,
        messages: List[Dict[str, str]],
        options: Optional[Dict[str, Any]] = None,
    ) -> ProviderResponse:
        """
        Run one chat completion.

        System messages are joined into the system prompt; the remaining
        messages are sent as the user prompt.

        Raises:
            LLMError: If the LLM is unavailable or the provider call fails
        """
        if not self.llm:
            raise LLMError("LLM service is not available")

        options = options or {}
        system_prompt = "\n\n".join(m["content"] for m in messages if m.get("role") == "system")
        user_prompt = "\n\n".join(m["content"] for m in messages if m.get("role") != "system")

        generation_params = {
            "temperature": options.get("temperature", 0.3),
            "max_tokens": options.get("max_tokens", 2048),
        }

        try:
            response = await self.llm.agenerate(
                user_prompt,
                system_prompt=system_prompt or None,
                **generation_params
            )
        except (ProviderAPIError, ModelNotFoundError, AuthenticationError) as e:
            logger.error(f"LLM API error during completion: {e}")
            raise LLMError(str(e)) from e

        return ProviderResponse(content=response.content or "")
