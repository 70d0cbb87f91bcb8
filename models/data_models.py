"""
Core data models for the Spotlight ad planner.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class AdGoal(Enum):
    """User-facing campaign goal."""
    TRAFFIC = "traffic"
    LEADS = "leads"
    SALES = "sales"
    OTHER = "other"


class OutcomeCategory(Enum):
    """Cost-model bucket that determines base cost-per-result."""
    ENGAGEMENT = "engagement"
    TRAFFIC = "traffic"
    LEADS = "leads"
    CONVERSIONS = "conversions"


class QualityTier(Enum):
    """Assumed creative/targeting efficiency."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class EstimationInput:
    """Inputs for a forward budget estimate."""
    outcome_category: OutcomeCategory
    audience_size: int
    duration_days: int
    quality_tier: QualityTier


@dataclass(frozen=True)
class ReverseEstimationInput:
    """Inputs for a reverse estimate from a fixed budget."""
    outcome_category: OutcomeCategory
    audience_size: int
    duration_days: int
    quality_tier: QualityTier
    total_budget: float


@dataclass(frozen=True)
class EstimationResult:
    """Derived spend and outcome figures for one estimate."""
    total_budget: float
    daily_budget: int
    expected_actions: int
    cost_per_result: float


@dataclass(frozen=True)
class EstimationError:
    """Tagged error value returned instead of raising."""
    code: str
    message: str


@dataclass
class InstagramPost:
    """A recent post from the scraped profile."""
    display_url: str
    url: str
    caption: str = ""
    num_likes: int = 0
    num_comments: int = 0
    is_video: bool = False
    video_url: Optional[str] = None
    video_view_count: Optional[int] = None


@dataclass
class InstagramProfileInfo:
    """Profile header data."""
    username: str
    biography: str = ""
    followers: int = 0
    following: int = 0
    num_posts: int = 0
    profile_pic_url: str = ""
    is_verified: bool = False
    link_in_bio: str = ""


@dataclass
class InstagramProfileData:
    """Profile header plus a bounded list of recent posts."""
    profile_info: InstagramProfileInfo
    recent_posts: List[InstagramPost] = field(default_factory=list)


@dataclass
class ProfileAnalysis:
    """AI analysis of brand voice and audience."""
    summary: str
    niche: str
    target_audience_keywords: List[str]
    potential_targets: List[str] = field(default_factory=list)


@dataclass
class AdVariation:
    """One ad copy variation with its own targeting keywords."""
    headline: str
    primary_text: str
    description: str
    target_audience_keywords: List[str]
    potential_targets: List[str] = field(default_factory=list)


@dataclass
class MetaInterest:
    """A targetable Meta ad interest returned for a search keyword."""
    id: str
    name: str
    audience_size: Optional[int]
    topic: Optional[str]
    search_term: str
    link: str


@dataclass
class CampaignBrief:
    """Campaign requirements submitted with the profile handle."""
    username: str
    ad_goal: str = AdGoal.TRAFFIC.value
    project_name: str = ""
    business_snapshot: str = ""
    custom_ad_goal: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    locations: List[str] = field(default_factory=list)


@dataclass
class AnalysisResult:
    """Scraped profile and its AI analysis."""
    profile_data: InstagramProfileData
    analysis: ProfileAnalysis


@dataclass
class AdSet:
    """Generated ad concepts for one profile and brief."""
    id: str
    username: str
    profile_data: InstagramProfileData
    analysis: ProfileAnalysis
    variations: List[AdVariation]
    meta_interests: List[MetaInterest]
    campaign_brief: CampaignBrief
