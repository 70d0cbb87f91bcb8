"""
Pydantic schemas for payloads crossing the system boundary.

The profile API response and every LLM response are validated against these
schemas before they are converted into the dataclasses in data_models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.data_models import (
    AdVariation,
    InstagramPost,
    InstagramProfileData,
    InstagramProfileInfo,
    ProfileAnalysis,
)


class ApiPost(BaseModel):
    """A post as returned by the profile API."""
    model_config = ConfigDict(extra="allow")

    id: str
    url: str
    displayUrl: str = ""
    caption: Optional[str] = ""
    likesCount: Optional[int] = 0
    commentsCount: Optional[int] = 0
    videoUrl: Optional[str] = None
    videoViewCount: Optional[int] = 0
    isVideo: Optional[bool] = None
    shortCode: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        # The API sometimes sends numeric ids
        if isinstance(v, int):
            return str(v)
        return v


class ApiProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    username: str
    biography: Optional[str] = ""
    followersCount: int = 0
    followsCount: int = 0
    postsCount: int = 0
    profilePicUrl: str = ""
    isVerified: bool = False
    externalUrl: Optional[str] = None
    latestPosts: List[ApiPost] = Field(default_factory=list)
    businessCategoryName: Optional[str] = None
    fullName: Optional[str] = None


class ApiProfileResponse(BaseModel):
    profile_data: ApiProfile

    def to_internal(self) -> InstagramProfileData:
        """Map the API shape to the internal profile representation."""
        profile = self.profile_data
        safe_posts = [post for post in profile.latestPosts if post.displayUrl and post.url]

        return InstagramProfileData(
            profile_info=InstagramProfileInfo(
                username=profile.username,
                biography=profile.biography or "",
                followers=profile.followersCount or 0,
                following=profile.followsCount or 0,
                num_posts=profile.postsCount or 0,
                profile_pic_url=profile.profilePicUrl or "",
                is_verified=bool(profile.isVerified),
                link_in_bio=profile.externalUrl or "",
            ),
            recent_posts=[
                InstagramPost(
                    display_url=post.displayUrl,
                    url=post.url,
                    caption=post.caption or "",
                    num_likes=post.likesCount or 0,
                    num_comments=post.commentsCount or 0,
                    is_video=bool(post.isVideo) or bool(post.videoUrl),
                    video_url=post.videoUrl or None,
                    video_view_count=post.videoViewCount or None,
                )
                for post in safe_posts
            ],
        )


class ProfileAnalysisSchema(BaseModel):
    summary: str = Field(description="A brief summary of the AI's understanding of the Instagram profile.")
    niche: str = Field(description="The specific niche or category the profile belongs to (e.g., 'Fitness Coach', 'Travel Blogger', 'Handmade Jewelry').")
    target_audience_keywords: List[str] = Field(max_length=5, description="A list of up to 5 keywords for the target audience.")
    potential_targets: List[str] = Field(default_factory=list, description="A list of 3-5 real-world business categories or audience types.")

    def to_model(self) -> ProfileAnalysis:
        return ProfileAnalysis(
            summary=self.summary,
            niche=self.niche,
            target_audience_keywords=list(self.target_audience_keywords),
            potential_targets=list(self.potential_targets),
        )


class AdVariationSchema(BaseModel):
    headline: str = Field(description="A compelling headline (under 40 characters).")
    primaryText: str = Field(description="Engaging primary text for the ad (1-3 sentences).")
    description: str = Field(description="A brief sentence to add context or a call to action.")
    target_audience_keywords: List[str] = Field(
        min_length=5, max_length=5,
        description="A list of exactly 5 keywords for this specific ad variation's target audience.",
    )
    potential_targets: List[str] = Field(
        default_factory=list,
        description="A short list of real-world business categories or audience types that this ad appeals to (max 3-5).",
    )

    def to_model(self) -> AdVariation:
        return AdVariation(
            headline=self.headline,
            primary_text=self.primaryText,
            description=self.description,
            target_audience_keywords=list(self.target_audience_keywords),
            potential_targets=list(self.potential_targets),
        )


class AdGenerationOutputSchema(BaseModel):
    adVariations: List[AdVariationSchema] = Field(
        min_length=5, max_length=5,
        description="An array of exactly 5 distinct ad copy variations.",
    )


class MetaInterestItem(BaseModel):
    """A single item from the Graph API adinterest search."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    audience_size: Optional[int] = None
    topic: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    @model_validator(mode="before")
    @classmethod
    def _fill_audience_size(cls, data):
        # Newer Graph versions report audience_size_lower_bound instead
        if isinstance(data, dict) and data.get("audience_size") is None:
            lower_bound = data.get("audience_size_lower_bound")
            if lower_bound is not None:
                data = {**data, "audience_size": lower_bound}
        return data


def schema_for_prompt(schema: type) -> Dict[str, Any]:
    """JSON schema description embedded in LLM prompts."""
    return schema.model_json_schema()
