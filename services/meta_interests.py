"""
Meta ad-interest lookup via the Graph API search endpoint.

Keywords produced by the ad generator are searched one at a time. Results
are tagged with the keyword that found them and later deduplicated by id.
"""

import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

import requests
from pydantic import ValidationError

from config.settings import config_manager
from models.data_models import MetaInterest
from models.errors import MetaInterestError
from models.schemas import MetaInterestItem

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"
AUDIENCE_INSIGHTS_URL = "https://www.facebook.com/ads/audience-insights/people?interest_ids={interest_id}"


def interest_link(interest_id: str) -> str:
    return AUDIENCE_INSIGHTS_URL.format(interest_id=interest_id)


def dedupe_interests(interests: Iterable[MetaInterest]) -> List[MetaInterest]:
    """Drop repeated interest ids, keeping the first occurrence and original order."""
    seen = set()
    unique = []
    for interest in interests:
        if interest.id in seen:
            continue
        seen.add(interest.id)
        unique.append(interest)
    return unique


def group_by_search_term(interests: Iterable[MetaInterest]) -> Dict[str, List[MetaInterest]]:
    """Group deduplicated interests under the keyword that found them."""
    grouped: Dict[str, List[MetaInterest]] = {}
    for interest in dedupe_interests(interests):
        grouped.setdefault(interest.search_term, []).append(interest)
    return grouped


def filter_for_keywords(interests: Iterable[MetaInterest], keywords: Iterable[str]) -> List[MetaInterest]:
    """Interests found by any of the given keywords, deduplicated by id."""
    wanted = set(keywords)
    return dedupe_interests(interest for interest in interests if interest.search_term in wanted)


def total_audience_size(interests: Iterable[MetaInterest]) -> int:
    """Sum of the known audience sizes; interests without one count as zero."""
    return sum(interest.audience_size or 0 for interest in dedupe_interests(interests))


def unique_keywords(keywords: Iterable[str]) -> List[str]:
    """Keywords with duplicates and blanks removed, in first-seen order."""
    result = []
    for keyword in keywords:
        keyword = keyword.strip()
        if keyword and keyword not in result:
            result.append(keyword)
    return result


class MetaInterestClient:
    """
    Client for the Graph API adinterest search.

    Without an access token every lookup returns an empty list, so the rest of
    the workflow still runs.
    """

    def __init__(self, access_token: Optional[str] = None, api_version: Optional[str] = None,
                 limit: Optional[int] = None, timeout: Optional[int] = None,
                 cache_ttl_seconds: Optional[int] = None, session: Optional[requests.Session] = None):
        config = config_manager.load_config()
        self.access_token = access_token if access_token is not None else config.meta_api_key
        self.api_version = api_version or config.meta_api_version
        self.limit = limit or config.meta_interest_limit
        self.timeout = timeout or config.request_timeout_seconds
        self.cache_ttl = cache_ttl_seconds if cache_ttl_seconds is not None else config.interest_cache_ttl_seconds
        self.session = session or requests.Session()
        self._cache: Dict[str, Tuple[float, List[MetaInterest]]] = {}

    @property
    def search_url(self) -> str:
        return f"{GRAPH_API_BASE}/{self.api_version}/search"

    def search_interests(self, keyword: str) -> List[MetaInterest]:
        """
        Search interests for a single keyword.

        Raises:
            MetaInterestError: HTTP, transport or payload failure
        """
        cached = self._cache.get(keyword)
        if cached and time.time() - cached[0] < self.cache_ttl:
            return list(cached[1])

        params = {
            "type": "adinterest",
            "q": keyword,
            "limit": self.limit,
            "access_token": self.access_token,
        }
        try:
            response = self.session.get(self.search_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetaInterestError(f"Interest search request failed for '{keyword}': {str(e)}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise MetaInterestError(f"Interest search returned invalid JSON for '{keyword}'") from e

        if not isinstance(payload, dict):
            raise MetaInterestError(f"Interest search returned an unexpected payload for '{keyword}'")

        if not response.ok or "error" in payload:
            error = payload.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            raise MetaInterestError(f"Interest search HTTP {response.status_code}: {message or response.text}")

        interests = []
        for item in payload.get("data") or []:
            try:
                parsed = MetaInterestItem.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping malformed interest for '{keyword}': {str(e)}")
                continue
            interests.append(MetaInterest(
                id=parsed.id,
                name=parsed.name,
                audience_size=parsed.audience_size,
                topic=parsed.topic,
                search_term=keyword,
                link=interest_link(parsed.id),
            ))

        self._cache[keyword] = (time.time(), interests)
        return list(interests)

    def find_interests(self, keywords: Iterable[str]) -> List[MetaInterest]:
        """
        Search every unique keyword and concatenate the results.

        A failure for one keyword is logged and skipped.
        """
        if not self.access_token:
            logger.warning("Meta access token not configured. Skipping interest fetching.")
            return []

        results: List[MetaInterest] = []
        for keyword in unique_keywords(keywords):
            logger.info(f"Fetching interests for: {keyword}")
            try:
                results.extend(self.search_interests(keyword))
            except MetaInterestError as e:
                logger.error(f"Error fetching Meta interests for '{keyword}': {str(e)}")
        return results
