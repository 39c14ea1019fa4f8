"""
Tests for Config priority: environment > config.json > defaults.
"""

import json

import pytest

from backend.app.config import (
    Config,
    DEFAULT_AI_TIMEOUT_S,
    DEFAULT_LLM_PROVIDER,
    DEFAULT_MAX_AI_RESULTS,
    DEFAULT_WORKSPACE_DIR,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LLM_PROVIDER", "LLM_MODEL", "LLM_BASE_URL", "WORKSPACE_DIR",
                 "SUGGESTION_AI_TIMEOUT_S", "SUGGESTION_MAX_AI_RESULTS"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_config_file(tmp_path):
    cfg = Config(tmp_path / "missing.json")

    assert cfg.get_llm_provider() == DEFAULT_LLM_PROVIDER
    assert cfg.get_llm_base_url() is None
    assert cfg.get_workspace_root() == DEFAULT_WORKSPACE_DIR
    assert cfg.get_ai_timeout() == DEFAULT_AI_TIMEOUT_S == 10.0
    assert cfg.get_max_ai_results() == DEFAULT_MAX_AI_RESULTS


def test_config_file_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "llm": {"provider": "ollama", "model": "qwen3:4b", "base_url": "http://localhost:11434"},
        "paths": {"workspace_dir": "/data/ws"},
        "suggestions": {"ai_timeout_s": 4, "max_ai_results": 3},
    }))
    cfg = Config(path)

    assert cfg.get_llm_provider() == "ollama"
    assert cfg.get_llm_model() == "qwen3:4b"
    assert cfg.get_llm_base_url() == "http://localhost:11434"
    assert cfg.get_workspace_root() == "/data/ws"
    assert cfg.get_ai_timeout() == 4.0
    assert cfg.get_max_ai_results() == 3


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"llm": {"provider": "ollama"}, "suggestions": {"ai_timeout_s": 4}}))
    monkeypatch.setenv("LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("SUGGESTION_AI_TIMEOUT_S", "2.5")

    cfg = Config(path)

    assert cfg.get_llm_provider() == "anthropic"
    assert cfg.get_ai_timeout() == 2.5


def test_invalid_env_number_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv("SUGGESTION_MAX_AI_RESULTS", "many")
    assert Config(tmp_path / "missing.json").get_max_ai_results() == DEFAULT_MAX_AI_RESULTS


def test_corrupt_config_file_uses_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert Config(path).get_llm_provider() == DEFAULT_LLM_PROVIDER


def test_set_workspace_dir_persists(tmp_path):
    path = tmp_path / "config.json"
    Config(path).set_workspace_dir("/srv/suggestions")
    assert Config(path).get_workspace_root() == "/srv/suggestions"
