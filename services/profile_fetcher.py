"""
Instagram profile retrieval through the profile scraping service.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from config.settings import config_manager
from models.data_models import InstagramProfileData
from models.errors import ProfileFetchError, ProfileNotFoundError, ProfileSchemaError
from models.schemas import ApiProfileResponse

logger = logging.getLogger(__name__)

GENERIC_FETCH_ERROR = (
    "The analysis API returned an error. The external service may be down or the username is invalid."
)


def extract_username(raw: str) -> Optional[str]:
    """
    Pull an Instagram handle out of user input.

    Accepts a bare handle, an @handle, or a profile URL such as
    https://www.instagram.com/handle/. Returns None for empty input.
    """
    if not raw or not raw.strip():
        return None
    value = raw.strip()

    parsed = urlparse(value)
    if parsed.scheme in ("http", "https") and parsed.hostname and "instagram.com" in parsed.hostname:
        parts = [part for part in parsed.path.split("/") if part]
        if parts:
            return parts[0]

    return value[1:] if value.startswith("@") else value


class ProfileFetcher:
    """Fetches profile and recent-post data for a username."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        config = config_manager.load_config()
        self.base_url = (base_url or config.profile_api_base_url).rstrip("/")
        self.timeout = timeout or config.request_timeout_seconds
        self.session = session or requests.Session()

    def fetch_profile(self, username: str) -> InstagramProfileData:
        """
        Fetch and validate a profile.

        Raises:
            ProfileNotFoundError: The profile does not exist or is private
            ProfileFetchError: Transport failure or non-success status
            ProfileSchemaError: The response did not match the expected shape
        """
        url = f"{self.base_url}/analyze/{username}"
        logger.info(f"Fetching Instagram profile for {username}")

        try:
            response = self.session.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Exception during profile fetch for {username}: {str(e)}")
            raise ProfileFetchError(
                f"Profile request failed: {str(e)}",
                user_message="Network error while trying to reach the profile service. Please check your connection.",
            ) from e

        if not response.ok:
            raise self._error_for_response(response, username)

        try:
            payload = response.json()
        except ValueError as e:
            raise ProfileSchemaError(f"Profile service returned invalid JSON: {response.text[:200]}") from e

        try:
            validated = ApiProfileResponse.model_validate(payload)
        except ValidationError as e:
            issues = ", ".join(issue["msg"] for issue in e.errors())
            raise ProfileSchemaError(
                f"Profile response failed validation: {str(e)}",
                user_message=f"Data format error: {issues}",
            ) from e

        profile = validated.to_internal()
        logger.info(f"Fetched {username}: {len(profile.recent_posts)} recent posts")
        return profile

    def _error_for_response(self, response: requests.Response, username: str) -> ProfileFetchError:
        """Build the error for a non-success response, separating not-found from other failures."""
        logger.error(f"Error fetching Instagram data for {username}. Status: {response.status_code}")
        error_text = None
        try:
            body = response.json()
            if isinstance(body, dict):
                error_text = body.get("error")
        except ValueError:
            pass

        if isinstance(error_text, str) and "not found" in error_text.lower():
            return ProfileNotFoundError(
                f"Profile {username} not found",
                user_message=(
                    f'The Instagram profile for "{username}" was not found. '
                    "Please check the username and ensure the profile is public."
                ),
                status_code=response.status_code,
            )

        return ProfileFetchError(
            f"Profile service returned HTTP {response.status_code}",
            user_message=error_text if isinstance(error_text, str) and error_text else GENERIC_FETCH_ERROR,
            status_code=response.status_code,
        )
