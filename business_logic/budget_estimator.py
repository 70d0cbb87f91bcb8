"""
Budget estimation model for Meta ad campaigns.

Maps an advertising goal, audience size, campaign duration and quality tier
to an estimated spend and outcome. Estimates run in both directions: forward
(inputs -> suggested budget) and reverse (fixed budget -> implied outcomes).
Both directions share the cost-per-result computation, so a forward estimate
fed back through the reverse estimate reproduces the same cost-per-result and,
within one action, the same expected actions.

Every function here is pure. Invalid goals and tiers come back as an
EstimationError value instead of an exception.
"""

import logging
import math
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Dict, Union

from models.data_models import (
    AdGoal,
    EstimationError,
    EstimationInput,
    EstimationResult,
    OutcomeCategory,
    QualityTier,
    ReverseEstimationInput,
)

logger = logging.getLogger(__name__)

INVALID_GOAL = "invalid_goal"
INVALID_TIER = "invalid_tier"

GOAL_TO_OUTCOME: Dict[AdGoal, OutcomeCategory] = {
    AdGoal.TRAFFIC: OutcomeCategory.TRAFFIC,
    AdGoal.LEADS: OutcomeCategory.LEADS,
    AdGoal.SALES: OutcomeCategory.CONVERSIONS,
    AdGoal.OTHER: OutcomeCategory.ENGAGEMENT,
}

# Base cost per result, in the configured currency unit
BASE_COST_PER_RESULT: Dict[OutcomeCategory, float] = {
    OutcomeCategory.ENGAGEMENT: 3,
    OutcomeCategory.TRAFFIC: 7,
    OutcomeCategory.LEADS: 20,
    OutcomeCategory.CONVERSIONS: 50,
}

# Lower quality ads are less efficient, so each result costs more
QUALITY_COST_MULTIPLIER: Dict[QualityTier, float] = {
    QualityTier.LOW: 1.20,
    QualityTier.MEDIUM: 1.00,
    QualityTier.HIGH: 0.85,
}

# Scales how many results the forward suggestion targets
QUALITY_ACTION_MULTIPLIER: Dict[QualityTier, float] = {
    QualityTier.LOW: 0.5,
    QualityTier.MEDIUM: 1.0,
    QualityTier.HIGH: 2.0,
}

AUDIENCE_CONVERSION_RATE = 0.01
MAX_BASELINE_ACTIONS = 1000

GoalLike = Union[AdGoal, str]
TierLike = Union[QualityTier, str]


def resolve_outcome_category(goal: GoalLike, allow_fallback: bool = False) -> Union[OutcomeCategory, EstimationError]:
    """
    Map a user-facing goal to its outcome category.

    Args:
        goal: AdGoal member or its string value
        allow_fallback: Resolve unknown goals to engagement instead of failing

    Returns:
        OutcomeCategory, or EstimationError for an unmapped goal
    """
    try:
        ad_goal = goal if isinstance(goal, AdGoal) else AdGoal(str(goal).strip().lower())
        return GOAL_TO_OUTCOME[ad_goal]
    except ValueError:
        if allow_fallback:
            logger.info(f"Unmapped goal '{goal}', falling back to engagement")
            return OutcomeCategory.ENGAGEMENT
        return EstimationError(code=INVALID_GOAL, message=f"Invalid goal: {goal!r}")


def resolve_quality_tier(tier: TierLike) -> Union[QualityTier, EstimationError]:
    """Map a tier value to a QualityTier member."""
    if isinstance(tier, QualityTier):
        return tier
    try:
        return QualityTier(str(tier).strip().lower())
    except ValueError:
        return EstimationError(code=INVALID_TIER, message=f"Invalid quality tier: {tier!r}")


def safe_duration(duration_days: int) -> int:
    """Clamp duration to at least one day."""
    return duration_days if duration_days and duration_days > 0 else 1


def cost_per_result(category: OutcomeCategory, tier: QualityTier) -> float:
    """Cost of one result for a category at a quality tier."""
    return round(BASE_COST_PER_RESULT[category] * QUALITY_COST_MULTIPLIER[tier], 2)


def baseline_actions(audience_size: int) -> int:
    """Medium-tier target: 1% of the audience, capped at 1000 actions."""
    audience = max(int(audience_size or 0), 0)
    return min(_floor(audience * _exact(AUDIENCE_CONVERSION_RATE)), MAX_BASELINE_ACTIONS)


def _exact(value: Union[int, float]) -> Decimal:
    # Decimal from the shortest repr keeps 8.4 as 8.4 instead of its binary expansion
    return Decimal(str(value))


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def estimate(params: EstimationInput) -> EstimationResult:
    """Forward estimate from an already-resolved input record."""
    duration = safe_duration(params.duration_days)
    cpr = cost_per_result(params.outcome_category, params.quality_tier)

    expected_actions = _ceil(
        baseline_actions(params.audience_size) * _exact(QUALITY_ACTION_MULTIPLIER[params.quality_tier])
    )
    total_budget = _ceil(_exact(cpr) * expected_actions)
    daily_budget = _ceil(Decimal(total_budget) / _exact(duration))

    return EstimationResult(
        total_budget=total_budget,
        daily_budget=daily_budget,
        expected_actions=expected_actions,
        cost_per_result=cpr,
    )


def reverse_estimate(params: ReverseEstimationInput) -> EstimationResult:
    """Reverse estimate from an already-resolved input record."""
    duration = safe_duration(params.duration_days)
    cpr = cost_per_result(params.outcome_category, params.quality_tier)
    budget = params.total_budget
    total_budget = budget if budget and math.isfinite(budget) and budget > 0 else 0

    expected_actions = _floor(_exact(total_budget) / _exact(cpr)) if cpr > 0 else 0
    daily_budget = _ceil(_exact(total_budget) / _exact(duration))

    return EstimationResult(
        total_budget=total_budget,
        daily_budget=daily_budget,
        expected_actions=expected_actions,
        cost_per_result=cpr,
    )


def estimate_budget(goal: GoalLike, audience_size: int, duration_days: int, quality_tier: TierLike,
                    allow_goal_fallback: bool = False) -> Union[EstimationResult, EstimationError]:
    """
    Suggest a budget for a campaign.

    Args:
        goal: Campaign goal (traffic, leads, sales, other)
        audience_size: Combined size of the targeted audience
        duration_days: Campaign length; values below 1 are treated as 1
        quality_tier: Creative/targeting quality tier
        allow_goal_fallback: Treat unknown goals as engagement

    Returns:
        EstimationResult, or EstimationError for an invalid goal or tier
    """
    category = resolve_outcome_category(goal, allow_goal_fallback)
    if isinstance(category, EstimationError):
        return category
    tier = resolve_quality_tier(quality_tier)
    if isinstance(tier, EstimationError):
        return tier

    return estimate(EstimationInput(
        outcome_category=category,
        audience_size=audience_size,
        duration_days=duration_days,
        quality_tier=tier,
    ))


def reverse_estimate_from_budget(goal: GoalLike, audience_size: int, duration_days: int, total_budget: float,
                                 quality_tier: TierLike,
                                 allow_goal_fallback: bool = False) -> Union[EstimationResult, EstimationError]:
    """
    Derive expected outcomes from a budget the user has fixed.

    Audience size is accepted for symmetry with estimate_budget but does not
    affect the result: once spend is fixed, results follow from cost
    efficiency alone.

    Returns:
        EstimationResult echoing total_budget, or EstimationError
    """
    category = resolve_outcome_category(goal, allow_goal_fallback)
    if isinstance(category, EstimationError):
        return category
    tier = resolve_quality_tier(quality_tier)
    if isinstance(tier, EstimationError):
        return tier

    return reverse_estimate(ReverseEstimationInput(
        outcome_category=category,
        audience_size=audience_size,
        duration_days=duration_days,
        quality_tier=tier,
        total_budget=total_budget,
    ))
