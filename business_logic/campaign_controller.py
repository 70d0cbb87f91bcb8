"""
Campaign Controller - orchestrates the profile-to-ad-set workflow.

This module ties together brief validation, profile fetching, AI analysis,
ad generation and interest lookup, and reports each step to the UI as a
(success, data, message, notification) tuple.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from models.data_models import AdSet, AnalysisResult, CampaignBrief, MetaInterest, ProfileAnalysis
from services.profile_fetcher import ProfileFetcher, extract_username
from services.meta_interests import MetaInterestClient, dedupe_interests, unique_keywords
from .ai_ad_generator import AIAdGenerator
from .campaign_validator import CampaignValidator
from .error_handler import error_handler, RetryConfig, ErrorInfo, ErrorSeverity, ErrorCategory

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

StepResult = Tuple[bool, Any, str, Optional[Dict[str, Any]]]


def toggle_interest(selected: List[MetaInterest], interest: MetaInterest) -> List[MetaInterest]:
    """Add the interest to the selection, or remove it if it is already selected."""
    if any(item.id == interest.id for item in selected):
        return [item for item in selected if item.id != interest.id]
    return selected + [interest]


class AdSetStore:
    """Saved ad sets, newest first, unique by id."""

    def __init__(self, ad_sets: Optional[List[AdSet]] = None):
        self.ad_sets: List[AdSet] = list(ad_sets or [])

    def save(self, ad_set: AdSet, selected_interests: List[MetaInterest]) -> Tuple[AdSet, bool]:
        """
        Save an ad set with only the interests the user selected.

        Returns:
            Tuple of (saved ad set, True if created or False if an existing entry was updated)
        """
        to_save = replace(ad_set, meta_interests=list(selected_interests))
        for index, existing in enumerate(self.ad_sets):
            if existing.id == to_save.id:
                self.ad_sets[index] = to_save
                logger.info(f"Updated saved ad set {to_save.id}")
                return to_save, False

        self.ad_sets.insert(0, to_save)
        logger.info(f"Saved ad set {to_save.id} for {to_save.username}")
        return to_save, True

    def get(self, ad_set_id: str) -> Optional[AdSet]:
        return next((ad_set for ad_set in self.ad_sets if ad_set.id == ad_set_id), None)

    def __len__(self):
        return len(self.ad_sets)


class CampaignController:
    """
    Main controller for the ad planning workflow.

    Each public step catches its own failures and returns a user-facing
    message and notification instead of raising.
    """

    def __init__(self, profile_fetcher: Optional[ProfileFetcher] = None,
                 ai_generator: Optional[AIAdGenerator] = None,
                 interest_client: Optional[MetaInterestClient] = None,
                 retry_config: Optional[RetryConfig] = None,
                 testing_mode: bool = False):
        """
        Initialize the campaign controller.

        Args:
            profile_fetcher: Profile service client
            ai_generator: Chat-completion wrapper
            interest_client: Meta interest search client
            retry_config: Retry policy for external calls
            testing_mode: Skip LLM client initialization for testing
        """
        self.profile_fetcher = profile_fetcher or ProfileFetcher()
        self.ai_generator = ai_generator or AIAdGenerator(skip_openai_init=testing_mode)
        self.interest_client = interest_client or MetaInterestClient()
        self.retry_config = retry_config or RetryConfig(max_attempts=2, base_delay=1.0)
        self.validator = CampaignValidator()

        logger.info("CampaignController initialized")

    def _failure(self, error_info: ErrorInfo, context: str) -> StepResult:
        error_handler.log_error(error_info, context)
        notification = error_handler.create_user_notification(error_info)
        return False, None, error_info.user_message, notification

    def _validation_failure(self, messages: Dict[str, str]) -> StepResult:
        error_info = ErrorInfo(
            category=ErrorCategory.VALIDATION_ERROR,
            severity=ErrorSeverity.WARNING,
            message=f"Brief validation failed: {messages}",
            user_message=" ".join(messages.values()),
            suggested_action="Please correct the highlighted issues and try again."
        )
        return self._failure(error_info, "Brief validation")

    def analyze_profile(self, brief: CampaignBrief) -> StepResult:
        """
        Fetch a profile and analyze it with the AI.

        Args:
            brief: Campaign brief holding the username or profile URL

        Returns:
            Tuple of (success, AnalysisResult or None, status message, notification)
        """
        validation = self.validator.validate_brief(brief)
        if not validation.is_valid:
            return self._validation_failure(validation.messages_by_field())

        username = extract_username(brief.username)
        if not username:
            error_info = ErrorInfo(
                category=ErrorCategory.USER_ERROR,
                severity=ErrorSeverity.WARNING,
                message="No username could be extracted",
                user_message="Please enter a valid Instagram username or profile URL."
            )
            return self._failure(error_info, "Profile analysis")

        logger.info(f"Starting profile analysis for {username}")

        success, profile_data, error_info = error_handler.retry_with_backoff(
            lambda: self.profile_fetcher.fetch_profile(username),
            self.retry_config,
            "profile fetch"
        )
        if not success:
            return self._failure(error_info, "Profile fetch")

        success, analysis, error_info = error_handler.retry_with_backoff(
            lambda: self.ai_generator.analyze_profile(profile_data, brief),
            self.retry_config,
            "profile analysis"
        )
        if not success:
            return self._failure(error_info, "AI profile analysis")

        result = AnalysisResult(profile_data=profile_data, analysis=analysis)
        return True, result, f"Analyzed @{username}", None

    def generate_ads(self, analysis_result: AnalysisResult, brief: CampaignBrief) -> StepResult:
        """
        Generate five ad variations and look up interests for their keywords.

        Returns:
            Tuple of (success, AdSet or None, status message, notification)
        """
        validation = self.validator.validate_for_generation(brief)
        if not validation.is_valid:
            return self._validation_failure(validation.messages_by_field())

        success, variations, error_info = error_handler.retry_with_backoff(
            lambda: self.ai_generator.generate_ad_variations(
                analysis_result.profile_data, analysis_result.analysis, brief),
            self.retry_config,
            "ad generation"
        )
        if not success:
            return self._failure(error_info, "Ad generation")

        keywords = unique_keywords(
            keyword for variation in variations for keyword in variation.target_audience_keywords
        )
        interests = dedupe_interests(self.interest_client.find_interests(keywords))

        ad_set = AdSet(
            id=datetime.now().isoformat(),
            username=analysis_result.profile_data.profile_info.username,
            profile_data=analysis_result.profile_data,
            analysis=analysis_result.analysis,
            variations=variations,
            meta_interests=interests,
            campaign_brief=brief,
        )

        notification = None
        if keywords and not interests:
            notification = {
                'type': 'warning',
                'title': 'No Interests Found',
                'message': 'Ads were generated but no Meta interests were found for their keywords.',
                'dismissible': True
            }

        logger.info(f"Ad set {ad_set.id}: {len(variations)} variations, {len(interests)} interests")
        return True, ad_set, f"Generated {len(variations)} ad variations", notification

    def refresh_variation(self, ad_set: AdSet, index: int) -> StepResult:
        """
        Replace one variation with a freshly generated one.

        New interests are merged into the ad set and deduplicated by id.

        Returns:
            Tuple of (success, updated AdSet or None, status message, notification)
        """
        if index < 0 or index >= len(ad_set.variations):
            error_info = ErrorInfo(
                category=ErrorCategory.USER_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"Variation index {index} out of range",
                user_message="That variation no longer exists."
            )
            return self._failure(error_info, "Variation refresh")

        success, variation, error_info = error_handler.retry_with_backoff(
            lambda: self.ai_generator.generate_single_variation(
                ad_set.profile_data, ad_set.analysis, ad_set.campaign_brief),
            self.retry_config,
            "variation refresh"
        )
        if not success:
            return self._failure(error_info, "Variation refresh")

        new_interests = self.interest_client.find_interests(variation.target_audience_keywords)

        variations = list(ad_set.variations)
        variations[index] = variation
        updated = replace(
            ad_set,
            variations=variations,
            meta_interests=dedupe_interests(ad_set.meta_interests + new_interests),
        )

        return True, updated, f"Variation {index + 1} Refreshed. Found {len(new_interests)} new interests.", None

    def update_analysis(self, analysis_result: AnalysisResult, analysis: ProfileAnalysis,
                        ad_set: Optional[AdSet] = None) -> Tuple[AnalysisResult, Optional[AdSet]]:
        """Carry user edits of the analysis into the stored result and current ad set."""
        updated_result = replace(analysis_result, analysis=analysis)
        updated_ad_set = replace(ad_set, analysis=analysis) if ad_set is not None else None
        return updated_result, updated_ad_set
