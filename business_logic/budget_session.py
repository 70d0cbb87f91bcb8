"""
Interactive budget calculator state.

The calculator is either showing the estimator's suggestion or the user's own
budget. The mode decides which estimator direction runs when any input changes:

    SUGGESTED        -> forward estimate, total budget is the suggestion
    MANUAL_OVERRIDE  -> reverse estimate, total budget is the user's figure

A direct budget edit enters MANUAL_OVERRIDE. Changing the quality tier, or an
explicit reset, returns to SUGGESTED. Goal, audience and duration changes keep
the current mode, so a newly selected audience never overwrites a manual budget.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Optional, Union

from models.data_models import EstimationError, EstimationResult, MetaInterest, QualityTier
from services.meta_interests import total_audience_size
from .budget_estimator import estimate_budget, resolve_quality_tier, reverse_estimate_from_budget

logger = logging.getLogger(__name__)

SLIDER_FLOOR = 50000
SLIDER_MINIMUM = 1000
SLIDER_STEP = 500


class BudgetMode(Enum):
    """Which estimator direction drives the calculator."""
    SUGGESTED = "suggested"
    MANUAL_OVERRIDE = "manual_override"


def sanitize_budget_input(value: Any) -> int:
    """Parse a raw budget field value; anything unusable becomes 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return 0
        parsed = int(value)
    else:
        try:
            parsed = int(str(value).strip())
        except (TypeError, ValueError):
            return 0
    return parsed if parsed >= 0 else 0


def campaign_duration_days(start_date: Optional[date], end_date: Optional[date]) -> int:
    """Inclusive day count of the campaign; 1 when dates are missing or reversed."""
    if start_date and end_date:
        diff = (end_date - start_date).days
        return diff + 1 if diff >= 0 else 1
    return 1


def selected_audience_size(interests: Iterable[MetaInterest], default_size: int) -> int:
    """Combined audience of the selected interests, or the default when it is empty."""
    total = total_audience_size(interests)
    return total if total > 0 else default_size


@dataclass
class BudgetCalculatorState:
    """
    Budget calculator for one ad variation.

    Holds the latest inputs, the current mode and the last good figures.
    Every mutating call recomputes immediately and returns the new result.
    """
    goal: str
    audience_size: int
    duration_days: int
    quality_tier: QualityTier = QualityTier.MEDIUM
    allow_goal_fallback: bool = False
    mode: BudgetMode = BudgetMode.SUGGESTED
    total_budget: float = 0
    daily_budget: int = 0
    expected_actions: Optional[int] = None
    cost_per_result: Optional[float] = None
    error: Optional[EstimationError] = field(default=None)

    def __post_init__(self):
        tier = resolve_quality_tier(self.quality_tier)
        self.quality_tier = tier if isinstance(tier, QualityTier) else QualityTier.MEDIUM
        self.recalculate()

    @property
    def is_manual(self) -> bool:
        return self.mode == BudgetMode.MANUAL_OVERRIDE

    @property
    def has_result(self) -> bool:
        return self.expected_actions is not None and self.cost_per_result is not None

    @property
    def slider_max(self) -> int:
        return int(max(SLIDER_FLOOR, self.total_budget * 2, SLIDER_MINIMUM))

    def recalculate(self) -> Union[EstimationResult, EstimationError]:
        """Run the estimator direction selected by the current mode."""
        if self.mode == BudgetMode.SUGGESTED:
            result = estimate_budget(
                self.goal, self.audience_size, self.duration_days, self.quality_tier,
                allow_goal_fallback=self.allow_goal_fallback,
            )
        else:
            result = reverse_estimate_from_budget(
                self.goal, self.audience_size, self.duration_days, self.total_budget, self.quality_tier,
                allow_goal_fallback=self.allow_goal_fallback,
            )

        if isinstance(result, EstimationError):
            # Keep the last good figures on screen
            logger.warning(f"Budget estimate failed: {result.message}")
            self.error = result
            return result

        self.error = None
        if self.mode == BudgetMode.SUGGESTED:
            self.total_budget = result.total_budget
        self.daily_budget = result.daily_budget
        self.expected_actions = result.expected_actions
        self.cost_per_result = result.cost_per_result
        return result

    def edit_budget(self, value: Any) -> Union[EstimationResult, EstimationError]:
        """User typed or dragged a budget: switch to manual override."""
        self.mode = BudgetMode.MANUAL_OVERRIDE
        self.total_budget = sanitize_budget_input(value)
        return self.recalculate()

    def change_quality_tier(self, tier: Union[QualityTier, str]) -> Union[EstimationResult, EstimationError]:
        """New tier: drop any manual budget and return to the suggestion."""
        resolved = resolve_quality_tier(tier)
        if isinstance(resolved, EstimationError):
            self.error = resolved
            return resolved
        self.quality_tier = resolved
        self.mode = BudgetMode.SUGGESTED
        return self.recalculate()

    def update_inputs(self, goal: Optional[str] = None, audience_size: Optional[int] = None,
                      duration_days: Optional[int] = None) -> Union[EstimationResult, EstimationError]:
        """Apply changed campaign inputs without leaving the current mode."""
        if goal is not None:
            self.goal = goal
        if audience_size is not None:
            self.audience_size = audience_size
        if duration_days is not None:
            self.duration_days = duration_days
        return self.recalculate()

    def reset_to_suggestion(self) -> Union[EstimationResult, EstimationError]:
        self.mode = BudgetMode.SUGGESTED
        return self.recalculate()

    def snapshot(self) -> Optional[EstimationResult]:
        """Current figures as an EstimationResult, or None before any result."""
        if not self.has_result:
            return None
        return EstimationResult(
            total_budget=self.total_budget,
            daily_budget=self.daily_budget,
            expected_actions=self.expected_actions,
            cost_per_result=self.cost_per_result,
        )
