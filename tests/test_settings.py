"""
Tests for configuration loading.
"""

import os
from unittest.mock import patch

import pytest

from config.settings import AppConfig, ConfigManager


@pytest.fixture
def manager():
    manager = ConfigManager()
    # Keep Streamlit secrets out of the way so only the patched environment is read
    with patch.object(ConfigManager, '_get_secret_or_env', lambda self, key: os.environ.get(key)):
        yield manager


class TestConfigManager:
    """Test environment-driven settings."""

    def test_defaults(self, manager):
        with patch.dict(os.environ, {}, clear=True):
            config = manager.load_config()

        assert config == AppConfig()
        assert config.meta_api_version == "v20.0"
        assert config.default_audience_size == 50000
        assert config.allow_goal_fallback is False

    def test_environment_overrides(self, manager):
        env = {
            "OPENROUTER_API_KEY": "or-key",
            "META_API_KEY": "meta-token",
            "META_INTEREST_LIMIT": "25",
            "DEFAULT_AUDIENCE_SIZE": "80000",
            "ALLOW_GOAL_FALLBACK": "true",
            "CURRENCY_SYMBOL": "Rs.",
        }
        with patch.dict(os.environ, env, clear=True):
            config = manager.load_config()

        assert config.llm_api_key == "or-key"
        assert config.meta_api_key == "meta-token"
        assert config.meta_interest_limit == 25
        assert config.default_audience_size == 80000
        assert config.allow_goal_fallback is True
        assert config.currency_symbol == "Rs."
        assert manager.get_meta_api_key() == "meta-token"
        assert manager.get_default_audience_size() == 80000

    def test_gemini_key_fallback(self, manager):
        with patch.dict(os.environ, {"GEMINI_API_KEY": "gemini-key"}, clear=True):
            assert manager.get_llm_api_key() == "gemini-key"

    def test_missing_llm_key_raises(self, manager):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError):
                manager.get_llm_api_key()

    def test_invalid_int_uses_default(self, manager):
        with patch.dict(os.environ, {"REQUEST_TIMEOUT_SECONDS": "soon"}, clear=True):
            assert manager.load_config().request_timeout_seconds == 30

    def test_config_is_cached_until_reset(self, manager):
        with patch.dict(os.environ, {"LLM_MODEL": "model-a"}, clear=True):
            assert manager.load_config().llm_model == "model-a"

        with patch.dict(os.environ, {"LLM_MODEL": "model-b"}, clear=True):
            assert manager.load_config().llm_model == "model-a"
            manager.reset()
            assert manager.load_config().llm_model == "model-b"
