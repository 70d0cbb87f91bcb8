# External services for the ad planner

from .profile_fetcher import ProfileFetcher, extract_username
from .meta_interests import MetaInterestClient, dedupe_interests

__all__ = ['ProfileFetcher', 'extract_username', 'MetaInterestClient', 'dedupe_interests']
