"""
Tests for AIAdGenerator prompt construction and response handling.
"""

import json
from datetime import date
from unittest.mock import Mock, patch

import httpx
import openai
import pytest

from business_logic.ai_ad_generator import (
    DEFAULT_LOCATIONS,
    AIAdGenerator,
    campaign_timeline,
    final_ad_goal,
    interpreted_objective,
)
from business_logic.error_handler import ErrorCategory, ErrorHandler, ErrorSeverity
from models.data_models import (
    CampaignBrief,
    InstagramPost,
    InstagramProfileData,
    InstagramProfileInfo,
    ProfileAnalysis,
)
from models.errors import AIResponseFormatError, AISchemaError, AIServiceError


def make_completion(payload, prompt_tokens=120, completion_tokens=80):
    content = payload if isinstance(payload, str) else json.dumps(payload)
    response = Mock()
    response.choices = [Mock(message=Mock(content=content))]
    response.usage = Mock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return response


def make_variation(index):
    return {
        "headline": f"Headline {index}",
        "primaryText": f"Primary text {index}.",
        "description": f"Description {index}",
        "target_audience_keywords": [f"kw{index}-{n}" for n in range(5)],
        "potential_targets": ["Cafes", "Offices"],
    }


@pytest.fixture
def profile():
    return InstagramProfileData(
        profile_info=InstagramProfileInfo(username="chai.corner", biography="Small batch masala chai"),
        recent_posts=[
            InstagramPost(display_url=f"https://cdn.example.com/{n}.jpg", url=f"https://instagram.com/p/{n}",
                          caption=f"caption {n}")
            for n in range(7)
        ],
    )


@pytest.fixture
def analysis():
    return ProfileAnalysis(
        summary="A Pune tea brand selling masala chai blends.",
        niche="Artisanal Tea",
        target_audience_keywords=["Cafes", "Office managers", "Tea lovers"],
        potential_targets=["Cafes", "Corporate gifting"],
    )


@pytest.fixture
def brief():
    return CampaignBrief(
        username="chai.corner",
        ad_goal="leads",
        business_snapshot="We are a tea company supplying cafes.",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 14),
        locations=["Pune", "Mumbai"],
    )


class TestPromptHelpers:
    """Test goal interpretation and timeline text."""

    def test_final_ad_goal(self, brief):
        assert final_ad_goal(brief) == "leads"

        other = CampaignBrief(username="x", ad_goal="other", custom_ad_goal="Grow event signups")
        assert final_ad_goal(other) == "Grow event signups"

    def test_interpreted_objective(self):
        assert interpreted_objective(CampaignBrief(username="x", ad_goal="traffic")) == "Traffic"
        assert interpreted_objective(CampaignBrief(username="x", ad_goal="leads")) == "Leads"
        assert interpreted_objective(CampaignBrief(username="x", ad_goal="leads"), single_variation=True) == "Lead Generation"
        assert interpreted_objective(CampaignBrief(username="x", ad_goal="sales")) == "Sales"
        assert interpreted_objective(CampaignBrief(username="x", ad_goal="other")) == "Sales"

    def test_campaign_timeline(self, brief):
        assert campaign_timeline(brief) == "The campaign runs from March 01, 2024 to March 14, 2024."
        assert campaign_timeline(CampaignBrief(username="x")) == "No specific timeline."


class TestAIAdGenerator:
    """Test cases for AIAdGenerator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = Mock()
        self.generator = AIAdGenerator(client=self.client)

    def test_analysis_prompt_with_snapshot(self, profile, brief):
        prompt = self.generator.create_analysis_prompt(profile, brief)

        assert "Ground Truth" in prompt
        assert "We are a tea company supplying cafes." in prompt
        assert '"caption 4"' in prompt
        assert '"caption 5"' not in prompt
        assert "target_audience_keywords" in prompt

    def test_analysis_prompt_without_snapshot(self, profile):
        prompt = self.generator.create_analysis_prompt(profile, CampaignBrief(username="chai.corner"))

        assert "Primary Context (Scraped from Instagram)" in prompt
        assert "Ground Truth" not in prompt

    def test_bulk_prompt(self, profile, analysis, brief):
        prompt = self.generator.create_bulk_generation_prompt(profile, analysis, brief)

        assert "5 distinct ad variations" in prompt
        assert "**Leads**" in prompt
        assert "Pune, Mumbai" in prompt
        assert "March 01, 2024" in prompt
        assert "adVariations" in prompt

    def test_single_prompt_default_locations(self, profile, analysis):
        brief = CampaignBrief(username="chai.corner", ad_goal="leads")
        prompt = self.generator.create_single_generation_prompt(profile, analysis, brief)

        assert "ONE new, distinct ad concept" in prompt
        assert "**Lead Generation**" in prompt
        assert DEFAULT_LOCATIONS in prompt

    def test_analyze_profile(self, profile, brief):
        self.client.chat.completions.create.return_value = make_completion({
            "summary": "Tea company for cafes",
            "niche": "Artisanal Tea",
            "target_audience_keywords": ["Cafes", "Hotels"],
            "potential_targets": ["Restaurants"],
        })

        analysis = self.generator.analyze_profile(profile, brief)

        assert analysis.niche == "Artisanal Tea"
        assert analysis.target_audience_keywords == ["Cafes", "Hotels"]

        kwargs = self.client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        assert self.generator.get_usage_summary()["prompt_tokens"] == 120

    def test_analysis_with_too_many_keywords(self, profile, brief):
        self.client.chat.completions.create.return_value = make_completion({
            "summary": "s",
            "niche": "n",
            "target_audience_keywords": ["a", "b", "c", "d", "e", "f"],
        })

        with pytest.raises(AISchemaError) as exc_info:
            self.generator.analyze_profile(profile, brief)

        assert exc_info.value.issues
        assert exc_info.value.issues[0].startswith("target_audience_keywords")

    def test_generate_ad_variations(self, profile, analysis, brief):
        self.client.chat.completions.create.return_value = make_completion(
            {"adVariations": [make_variation(n) for n in range(5)]})

        variations = self.generator.generate_ad_variations(profile, analysis, brief)

        assert len(variations) == 5
        assert variations[2].primary_text == "Primary text 2."
        assert len(variations[0].target_audience_keywords) == 5

    def test_generate_ad_variations_wrong_count(self, profile, analysis, brief):
        self.client.chat.completions.create.return_value = make_completion(
            {"adVariations": [make_variation(n) for n in range(3)]})

        with pytest.raises(AISchemaError):
            self.generator.generate_ad_variations(profile, analysis, brief)

    def test_generate_single_variation(self, profile, analysis, brief):
        self.client.chat.completions.create.return_value = make_completion(make_variation(9))

        variation = self.generator.generate_single_variation(profile, analysis, brief)

        assert variation.headline == "Headline 9"

    def test_invalid_json(self, profile, brief):
        self.client.chat.completions.create.return_value = make_completion("not json at all")

        with pytest.raises(AIResponseFormatError):
            self.generator.analyze_profile(profile, brief)

    def test_non_object_json(self, profile, brief):
        self.client.chat.completions.create.return_value = make_completion("[1, 2, 3]")

        with pytest.raises(AIResponseFormatError):
            self.generator.analyze_profile(profile, brief)

    def test_api_error(self, profile, brief):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        self.client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)

        with pytest.raises(AIServiceError):
            self.generator.analyze_profile(profile, brief)

        assert self.generator.get_usage_summary()["failed_calls"] == 1

    def _status_error(self, status_code):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        response = httpx.Response(status_code, request=request)
        return openai.APIStatusError(f"HTTP {status_code}", response=response, body=None)

    def test_rate_limit(self, profile, brief):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        response = httpx.Response(429, request=request)
        self.client.chat.completions.create.side_effect = openai.RateLimitError(
            "Rate limit exceeded", response=response, body=None)
        handler = ErrorHandler()

        with pytest.raises(AIServiceError) as exc_info:
            self.generator.analyze_profile(profile, brief)
        info = handler.classify_error(exc_info.value, "profile analysis")

        assert exc_info.value.status_code == 429
        assert "busy" in info.user_message
        assert info.retry_possible is True
        assert handler.rate_limit_tracker['count'] == 1

    def test_invalid_api_key_is_critical_and_not_retried(self, profile, brief):
        self.client.chat.completions.create.side_effect = self._status_error(401)

        with pytest.raises(AIServiceError) as exc_info:
            self.generator.analyze_profile(profile, brief)
        info = ErrorHandler().classify_error(exc_info.value, "profile analysis")

        assert exc_info.value.status_code == 401
        assert info.severity == ErrorSeverity.CRITICAL
        assert info.retry_possible is False
        assert "authentication failed" in info.user_message

    def test_server_error_keeps_status(self, profile, brief):
        self.client.chat.completions.create.side_effect = self._status_error(503)

        with pytest.raises(AIServiceError) as exc_info:
            self.generator.analyze_profile(profile, brief)
        info = ErrorHandler().classify_error(exc_info.value)

        assert exc_info.value.status_code == 503
        assert "internal error" in info.user_message

    def test_timeout_classified_as_network(self, profile, brief):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        self.client.chat.completions.create.side_effect = openai.APITimeoutError(request=request)

        with pytest.raises(AIServiceError) as exc_info:
            self.generator.analyze_profile(profile, brief)
        info = ErrorHandler().classify_error(exc_info.value)

        assert exc_info.value.status_code is None
        assert info.category == ErrorCategory.NETWORK_ERROR
        assert info.retry_possible is True

    def test_missing_client(self, profile, brief):
        generator = AIAdGenerator(skip_openai_init=True)

        with pytest.raises(AIServiceError):
            generator.analyze_profile(profile, brief)

    @patch('business_logic.ai_ad_generator.OpenAI')
    def test_client_initialization(self, mock_openai):
        with patch('business_logic.ai_ad_generator.config_manager.get_llm_api_key', return_value="test-key"):
            AIAdGenerator()

        kwargs = mock_openai.call_args.kwargs
        assert kwargs["api_key"] == "test-key"
        assert kwargs["base_url"] == "https://openrouter.ai/api/v1"
        assert kwargs["default_headers"]["X-Title"] == "Spotlight"
