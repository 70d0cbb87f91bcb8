"""
AI ad generator for profile analysis and ad copy using an OpenAI-compatible API.

This module builds the prompts for brand analysis and ad copy generation,
calls the chat-completion endpoint in JSON mode, and validates every reply
against the pydantic schemas before it reaches the rest of the app.
"""

import logging
import json
import time
from typing import Dict, List, Optional, Any
import openai
from openai import OpenAI
from pydantic import BaseModel, ValidationError

from models.data_models import AdGoal, AdVariation, CampaignBrief, InstagramProfileData, ProfileAnalysis
from models.errors import AIResponseFormatError, AISchemaError, AIServiceError
from models.schemas import AdGenerationOutputSchema, AdVariationSchema, ProfileAnalysisSchema, schema_for_prompt
from config.settings import config_manager

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = "pan-India metro regions"
MAX_CAPTIONS_IN_PROMPT = 5


def final_ad_goal(brief: CampaignBrief) -> str:
    """Goal text as the user stated it; custom text replaces 'other'."""
    if brief.ad_goal == AdGoal.OTHER.value:
        return brief.custom_ad_goal
    return brief.ad_goal


def interpreted_objective(brief: CampaignBrief, single_variation: bool = False) -> str:
    """Funnel objective the ads should drive."""
    if brief.ad_goal == AdGoal.TRAFFIC.value:
        return "Traffic"
    if brief.ad_goal == AdGoal.LEADS.value:
        return "Lead Generation" if single_variation else "Leads"
    return "Sales"


def recent_captions(profile: InstagramProfileData) -> str:
    return ", ".join(f'"{post.caption}"' for post in profile.recent_posts[:MAX_CAPTIONS_IN_PROMPT])


def _format_date(value) -> str:
    return value.strftime("%B %d, %Y")


def campaign_timeline(brief: CampaignBrief) -> str:
    if brief.start_date and brief.end_date:
        return f"The campaign runs from {_format_date(brief.start_date)} to {_format_date(brief.end_date)}."
    return "No specific timeline."


class AIAdGenerator:
    """
    Generates profile analyses and ad copy with a chat-completion model.

    Handles prompt construction, API calls in JSON mode, and schema
    validation of the model output.
    """

    def __init__(self, skip_openai_init: bool = False, client: Optional[OpenAI] = None):
        """
        Initialize the AI Ad Generator.

        Args:
            skip_openai_init: Skip OpenAI client initialization (for testing)
            client: Pre-built client, used instead of creating one
        """
        config = config_manager.load_config()
        self.client = client
        if self.client is None and not skip_openai_init:
            self._initialize_openai_client()

        self.model_name = config.llm_model
        self.temperature = 0.8
        self.max_tokens = 2000
        self.request_timeout = 60.0

        self.usage_tracker = {
            'calls': 0,
            'failed_calls': 0,
            'prompt_tokens': 0,
            'completion_tokens': 0,
            'response_times': []
        }

    def _initialize_openai_client(self):
        """Initialize the OpenAI-compatible client for the configured provider."""
        try:
            config = config_manager.load_config()
            self.client = OpenAI(
                api_key=config_manager.get_llm_api_key(),
                base_url=config.llm_base_url,
                default_headers={
                    "HTTP-Referer": config.llm_referer,
                    "X-Title": config.llm_title,
                },
            )
            logger.info("LLM client initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize LLM client: {str(e)}")
            raise

    def create_analysis_prompt(self, profile: InstagramProfileData, brief: CampaignBrief) -> str:
        """
        Build the brand analysis prompt.

        A business snapshot in the brief is ground truth; the scraped
        biography and captions then only inform tone. Without a snapshot the
        scraped content is the primary context.
        """
        goal = final_ad_goal(brief)
        captions = recent_captions(profile)
        biography = profile.profile_info.biography

        if brief.business_snapshot and brief.business_snapshot.strip():
            context = f"""
**Primary Context (User-Provided - Ground Truth):**
- **Business Snapshot:** "{brief.business_snapshot}"  <-- THIS IS THE MOST IMPORTANT INFORMATION. Your analysis MUST be consistent with this. Do not contradict it. For example, if the user states they are a 'company', you must use the word 'company' in your analysis, not 'agency'.
- **Ad Goal:** "{goal}"

**Secondary Context (Scraped from Instagram for style/tone reference):**
- **Biography:** "{biography}"
- **Recent Post Captions:** {captions}

**Your Tasks:**
1.  **Synthesize and Summarize:** Based on the **Business Snapshot**, provide a concise summary of the profile and its business. Use the secondary context only for tone and style, not for core business identity.
2.  **Determine Niche:** Derive the profile's primary business niche directly from the **Business Snapshot**.
"""
        else:
            context = f"""
**Primary Context (Scraped from Instagram):**
- **Biography:** "{biography}"
- **Recent Post Captions:** {captions}

**Secondary Context:**
- **Ad Goal:** "{goal}"

**Your Tasks:**
1.  **Analyze and Summarize:** Based on the Instagram biography and recent posts, provide a concise summary of the profile and its likely business.
2.  **Determine Niche:** Identify the profile's primary business niche from the content.
"""

        return f"""You are an expert Instagram profile analyst and marketing strategist.
Your primary goal is to analyze the user's brand based on the information provided.
{context}
3.  **Generate Target Keywords:** Create a list of **MAXIMUM 5** target audience keywords. These keywords must represent the *potential clients or customers* for the brand. For example, if the brand is a Social Media Marketing agency, target keywords should be its potential clients like 'Resorts', 'Hotels', 'Local Restaurants', 'Real Estate Agents', 'Startups', not generic terms like 'digital marketing'.

4.  **Generate Potential Targets:** Based on your analysis, generate a list of 3-5 potential real-world business categories or audience types that could be targeted. For example: ["Restaurants", "Online Coaches", "Boutique Stores"].

You MUST output ONLY a valid JSON object that satisfies the following JSON schema:
{json.dumps(schema_for_prompt(ProfileAnalysisSchema))}
"""

    def _campaign_context(self, profile: InstagramProfileData, analysis: ProfileAnalysis,
                          brief: CampaignBrief, objective: str, subject: str) -> str:
        locations = ", ".join(brief.locations) if brief.locations else DEFAULT_LOCATIONS
        return f"""**CAMPAIGN CONTEXT & GOALS:**
- **Brand Snapshot:** "{brief.business_snapshot}"
- **Campaign Goal:** "{final_ad_goal(brief)}"
- **Interpreted Objective:** Your primary goal is to generate {subject} that drive **{objective}**.
- **Campaign Timeline:** {campaign_timeline(brief)}
- **Target Locations:** {locations}.

**AI-POWERED ANALYSIS & TONE (USER-APPROVED):**
- **Profile Summary:** "{analysis.summary}"
- **Profile Niche:** "{analysis.niche}"
- **Approved Target Keywords:** [{", ".join(analysis.target_audience_keywords)}]
- **Approved Potential Targets:** [{", ".join(analysis.potential_targets)}] <-- Use these as inspiration.
- **Brand Tone (from recent posts):** Analyze the tone from these captions: {recent_captions(profile)}"""

    def create_bulk_generation_prompt(self, profile: InstagramProfileData, analysis: ProfileAnalysis,
                                      brief: CampaignBrief) -> str:
        """Prompt for five distinct ad variations in a single reply."""
        objective = interpreted_objective(brief)
        context = self._campaign_context(profile, analysis, brief, objective, "ads")

        return f"""You are an expert Meta ad campaign expert and marketing copywriter. Your task is to generate 5 distinct ad variations based on the provided campaign brief and Instagram profile data.

{context}

**YOUR TASK: GENERATE 5 UNIQUE AD VARIATIONS**

Create a JSON object containing a list of 5 unique ad variations. Each variation MUST:
1.  Have a distinct angle or theme.
2.  Be laser-focused on the campaign objective of **{objective}**.
3.  Contain a unique set of 5 `target_audience_keywords` that are different from the other variations, inspired by the Approved Target Keywords.
4.  Have a compelling `headline` (under 40 characters), engaging `primaryText` (1-3 sentences), and a clear `description`.
5.  Include a `potential_targets` field: a short list of 3-5 real-world business categories or audience types (e.g., ["Restaurants", "Online Coaches", "Boutique Stores"]), inspired by the Approved Potential Targets.

You MUST output ONLY a valid JSON object that satisfies the following JSON schema. Do not include any conversational text, just the JSON.
{json.dumps(schema_for_prompt(AdGenerationOutputSchema))}
"""

    def create_single_generation_prompt(self, profile: InstagramProfileData, analysis: ProfileAnalysis,
                                        brief: CampaignBrief) -> str:
        """Prompt for one replacement ad variation."""
        objective = interpreted_objective(brief, single_variation=True)
        context = self._campaign_context(profile, analysis, brief, objective, "an ad")

        return f"""You are an expert marketing copywriter and Meta Ads strategist. Your task is to generate ONE new, distinct ad concept based on the provided campaign brief and Instagram profile data.

{context}

**YOUR TASK: GENERATE ONE UNIQUE AD VARIATION**

Create a single JSON object for one new ad variation. This variation MUST:
1.  Have a distinct angle or theme.
2.  Be laser-focused on the campaign objective of **{objective}**.
3.  Contain a unique set of 5 `target_audience_keywords`.
4.  Have a compelling `headline` (under 40 characters), engaging `primaryText` (1-3 sentences), and a clear `description`.
5.  Include a `potential_targets` field: a short list of 3-5 real-world business categories or audience types (e.g., ["Restaurants", "Online Coaches", "Boutique Stores"]), inspired by the Approved Potential Targets.

You MUST output ONLY a valid JSON object that satisfies the following JSON schema. Do not include any conversational text, just the JSON.
{json.dumps(schema_for_prompt(AdVariationSchema))}
"""

    def analyze_profile(self, profile: InstagramProfileData, brief: CampaignBrief) -> ProfileAnalysis:
        """
        Analyze brand voice and audience for a profile.

        Raises:
            AIServiceError: Transport or API failure
            AIResponseFormatError: Reply was not JSON
            AISchemaError: Reply did not match the analysis schema
        """
        prompt = self.create_analysis_prompt(profile, brief)
        data = self._call_llm(prompt)
        analysis = self._validate(ProfileAnalysisSchema, data).to_model()
        logger.info(f"Profile analysis complete: niche={analysis.niche}")
        return analysis

    def generate_ad_variations(self, profile: InstagramProfileData, analysis: ProfileAnalysis,
                               brief: CampaignBrief) -> List[AdVariation]:
        """Generate exactly five ad variations."""
        prompt = self.create_bulk_generation_prompt(profile, analysis, brief)
        data = self._call_llm(prompt)
        output = self._validate(AdGenerationOutputSchema, data)
        variations = [variation.to_model() for variation in output.adVariations]
        logger.info(f"Generated {len(variations)} ad variations")
        return variations

    def generate_single_variation(self, profile: InstagramProfileData, analysis: ProfileAnalysis,
                                  brief: CampaignBrief) -> AdVariation:
        """Generate one new ad variation."""
        prompt = self.create_single_generation_prompt(profile, analysis, brief)
        data = self._call_llm(prompt)
        return self._validate(AdVariationSchema, data).to_model()

    def _validate(self, schema: type, data: Dict[str, Any]) -> BaseModel:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            issues = [
                f"{'.'.join(str(part) for part in issue['loc'])}: {issue['msg']}" if issue['loc'] else issue['msg']
                for issue in e.errors()
            ]
            logger.error(f"AI response failed {schema.__name__} validation: {issues}")
            raise AISchemaError(
                f"{schema.__name__} validation failed",
                issues=issues,
                user_message=f"AI response format error: {', '.join(issues)}",
            ) from e

    def _call_llm(self, system_prompt: str) -> Dict[str, Any]:
        """
        Call the chat-completion API in JSON mode and parse the reply.

        Args:
            system_prompt: Complete instruction prompt

        Returns:
            Parsed JSON object

        Raises:
            AIServiceError: Client missing, transport or API failure
            AIResponseFormatError: Empty or non-JSON content
        """
        if not self.client:
            raise AIServiceError(
                "LLM client not initialized",
                user_message="AI service is not configured. Please check the API key configuration.",
            )

        start_time = time.time()
        self.usage_tracker['calls'] += 1

        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "system", "content": system_prompt}],
                response_format={"type": "json_object"},
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.request_timeout,
            )
        except openai.APIError as e:
            self.usage_tracker['failed_calls'] += 1
            raise AIServiceError(
                f"AI service error: {str(e)}",
                user_message="Failed to get a response from the AI service. "
                             "The API key might be invalid or the service may be down.",
                status_code=getattr(e, "status_code", None),
            ) from e
        finally:
            self.usage_tracker['response_times'].append(time.time() - start_time)

        usage = getattr(response, 'usage', None)
        if usage:
            self.usage_tracker['prompt_tokens'] += getattr(usage, 'prompt_tokens', 0) or 0
            self.usage_tracker['completion_tokens'] += getattr(usage, 'completion_tokens', 0) or 0

        if not response.choices:
            raise AIResponseFormatError("AI service returned no choices",
                                        user_message="The AI service returned an empty response.")

        content = response.choices[0].message.content or "{}"
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse AI JSON response: {content[:500]}...")
            raise AIResponseFormatError(f"Invalid JSON response from AI service: {str(e)}",
                                        user_message="The AI service returned an invalid response. Please try again.") from e

        if not isinstance(parsed, dict):
            raise AIResponseFormatError("AI response is not a JSON object",
                                        user_message="The AI service returned an invalid response. Please try again.")

        return parsed

    def get_usage_summary(self) -> Dict[str, Any]:
        """Call counts, token usage and mean response time."""
        times = self.usage_tracker['response_times']
        return {
            'calls': self.usage_tracker['calls'],
            'failed_calls': self.usage_tracker['failed_calls'],
            'prompt_tokens': self.usage_tracker['prompt_tokens'],
            'completion_tokens': self.usage_tracker['completion_tokens'],
            'avg_response_time': sum(times) / len(times) if times else 0.0,
        }
