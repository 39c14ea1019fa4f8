"""
Configuration management for the Code Suggest backend.

Handles loading project-level configuration: LLM provider settings, the
workspace directory used by the JSON stores, and suggestion generation limits.

Configuration priority (highest to lowest):
1. Environment variables (for Docker/container deployments)
2. config.json file (for local development)
3. Built-in defaults
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Config file path at project root
CONFIG_FILE = Path(__file__).parent.parent.parent / "config.json"

# Default values (used when neither env var nor config.json specifies)
DEFAULT_LLM_PROVIDER = "openai"
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_WORKSPACE_DIR = "backend/suggestion_workspace"
DEFAULT_AI_TIMEOUT_S = 10.0
DEFAULT_MAX_AI_RESULTS = 5


class Config:
    """
    Project-level configuration manager.

    Priority: ENV > config.json > defaults

    Environment variables for Docker:
      - LLM_PROVIDER: LLM provider name (ollama, openai, anthropic, lmstudio, ...)
      - LLM_MODEL: Model name for the selected provider
      - LLM_BASE_URL: Optional base URL for local/self-hosted providers
      - WORKSPACE_DIR: Root directory for persisted files and suggestions
      - SUGGESTION_AI_TIMEOUT_S: Seconds to wait for the model before giving up
      - SUGGESTION_MAX_AI_RESULTS: Maximum suggestions requested from the model
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or CONFIG_FILE
        self.data = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    return json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load config: {e}")
                return self._default_config()
        else:
            return self._default_config()

    def save(self) -> None:
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w') as f:
                json.dump(self.data, f, indent=2)
            logger.info(f"Configuration saved to {self.config_file}")
        except OSError as e:
            logger.error(f"Failed to save config: {e}")

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "llm": {
                "provider": DEFAULT_LLM_PROVIDER,
                "model": DEFAULT_LLM_MODEL
            },
            "suggestions": {
                "ai_timeout_s": DEFAULT_AI_TIMEOUT_S,
                "max_ai_results": DEFAULT_MAX_AI_RESULTS
            }
        }

    def get_llm_provider(self) -> str:
        """
        Get configured LLM provider.

        Priority: LLM_PROVIDER env var > config.json > default
        """
        env_provider = os.getenv('LLM_PROVIDER')
        if env_provider:
            return env_provider

        return self.data.get("llm", {}).get("provider", DEFAULT_LLM_PROVIDER)

    def get_llm_model(self) -> str:
        """
        Get configured LLM model.

        Priority: LLM_MODEL env var > config.json > default
        """
        env_model = os.getenv('LLM_MODEL')
        if env_model:
            return env_model

        return self.data.get("llm", {}).get("model", DEFAULT_LLM_MODEL)

    def get_llm_base_url(self) -> Optional[str]:
        """Get an optional provider base URL (ENV > config.json > none)."""
        env_url = os.getenv('LLM_BASE_URL')
        if env_url:
            return env_url

        return self.data.get("llm", {}).get("base_url")

    def get_workspace_root(self) -> str:
        """Get workspace root directory (ENV > config.json > default)."""
        env_path = os.getenv('WORKSPACE_DIR')
        if env_path:
            return env_path

        config_path = self.data.get('paths', {}).get('workspace_dir')
        if config_path:
            return config_path

        return DEFAULT_WORKSPACE_DIR

    def get_ai_timeout(self) -> float:
        """Seconds allowed for one model round trip (ENV > config.json > default)."""
        env_timeout = os.getenv('SUGGESTION_AI_TIMEOUT_S')
        if env_timeout:
            try:
                return float(env_timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid SUGGESTION_AI_TIMEOUT_S={env_timeout!r}")

        return float(self.data.get("suggestions", {}).get("ai_timeout_s", DEFAULT_AI_TIMEOUT_S))

    def get_max_ai_results(self) -> int:
        """Upper bound on suggestions requested from the model."""
        env_max = os.getenv('SUGGESTION_MAX_AI_RESULTS')
        if env_max:
            try:
                return int(env_max)
            except ValueError:
                logger.warning(f"Ignoring invalid SUGGESTION_MAX_AI_RESULTS={env_max!r}")

        return int(self.data.get("suggestions", {}).get("max_ai_results", DEFAULT_MAX_AI_RESULTS))

    def set_workspace_dir(self, workspace_dir: str) -> None:
        """Set a custom workspace path in config.json."""
        if 'paths' not in self.data:
            self.data['paths'] = {}
        self.data['paths']['workspace_dir'] = workspace_dir
        self.save()


# Global config instance
config = Config()
