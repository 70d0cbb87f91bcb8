"""
Configuration management for the Spotlight ad planner.
Handles API keys, service endpoints, and estimator policy settings.
"""

import os
import streamlit as st
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class AppConfig:
    """Application configuration settings."""
    llm_api_key: Optional[str] = None
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "google/gemini-flash-1.5"
    llm_referer: str = "https://spotlight-pro.web.app"
    llm_title: str = "Spotlight"
    meta_api_key: Optional[str] = None
    meta_api_version: str = "v20.0"
    meta_interest_limit: int = 50
    profile_api_base_url: str = "https://appify-insta-scrapper-backend-mn4d.onrender.com"
    request_timeout_seconds: int = 30
    default_audience_size: int = 50000
    currency_symbol: str = "₹"
    allow_goal_fallback: bool = False
    interest_cache_ttl_seconds: int = 300


class ConfigManager:
    """Manages application configuration and settings."""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """Load configuration from environment and Streamlit secrets."""
        if self._config is not None:
            return self._config

        defaults = AppConfig()
        self._config = AppConfig(
            llm_api_key=self._get_secret_or_env("OPENROUTER_API_KEY") or self._get_secret_or_env("GEMINI_API_KEY"),
            llm_base_url=self._get_setting("LLM_BASE_URL", defaults.llm_base_url),
            llm_model=self._get_setting("LLM_MODEL", defaults.llm_model),
            meta_api_key=self._get_secret_or_env("META_API_KEY"),
            meta_api_version=self._get_setting("META_API_VERSION", defaults.meta_api_version),
            meta_interest_limit=self._get_int_setting("META_INTEREST_LIMIT", defaults.meta_interest_limit),
            profile_api_base_url=self._get_setting("PROFILE_API_BASE_URL", defaults.profile_api_base_url),
            request_timeout_seconds=self._get_int_setting("REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds),
            default_audience_size=self._get_int_setting("DEFAULT_AUDIENCE_SIZE", defaults.default_audience_size),
            currency_symbol=self._get_setting("CURRENCY_SYMBOL", defaults.currency_symbol),
            allow_goal_fallback=self._get_bool_setting("ALLOW_GOAL_FALLBACK", defaults.allow_goal_fallback),
            interest_cache_ttl_seconds=self._get_int_setting("INTEREST_CACHE_TTL_SECONDS", defaults.interest_cache_ttl_seconds),
        )

        return self._config

    def reset(self):
        """Drop the cached configuration so the next load re-reads sources."""
        self._config = None

    def _get_secret_or_env(self, key: str) -> Optional[str]:
        """Get value from Streamlit secrets or environment variables."""
        # Try Streamlit secrets first
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return st.secrets[key]
        except Exception:
            pass

        # Fall back to environment variables
        return os.getenv(key)

    def _get_setting(self, key: str, default: str) -> str:
        """Get string setting with default value."""
        value = self._get_secret_or_env(key)
        return value if value is not None else default

    def _get_int_setting(self, key: str, default: int) -> int:
        """Get integer setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return default

    def _get_bool_setting(self, key: str, default: bool) -> bool:
        """Get boolean setting with default value."""
        value = self._get_secret_or_env(key)
        if value is None:
            return default
        return str(value).strip().lower() in ("1", "true", "yes", "on")

    def get_llm_api_key(self) -> str:
        """Get the chat-completion API key, raising if it is not configured."""
        config = self.load_config()
        if not config.llm_api_key:
            raise ValueError(
                "LLM API key not found. Please set OPENROUTER_API_KEY (or GEMINI_API_KEY) in "
                "Streamlit secrets or environment variables."
            )
        return config.llm_api_key

    def get_meta_api_key(self) -> Optional[str]:
        """Get the Meta Graph API access token, if configured."""
        return self.load_config().meta_api_key

    def get_default_audience_size(self) -> int:
        """Audience size used by the budget calculator when no interest is selected."""
        return self.load_config().default_audience_size


# Global configuration manager instance
config_manager = ConfigManager()
