"""
Unit tests for the forward and reverse budget estimator.
"""

import unittest

from business_logic.budget_estimator import (
    INVALID_GOAL,
    INVALID_TIER,
    baseline_actions,
    cost_per_result,
    estimate_budget,
    resolve_outcome_category,
    reverse_estimate_from_budget,
)
from models.data_models import AdGoal, EstimationError, EstimationResult, OutcomeCategory, QualityTier


class TestForwardEstimate(unittest.TestCase):
    """Test cases for estimate_budget."""

    def test_sales_medium_scenario(self):
        """Sales goal, 50k audience, 10 days, medium tier."""
        result = estimate_budget("sales", 50000, 10, "medium")

        self.assertIsInstance(result, EstimationResult)
        self.assertEqual(result.cost_per_result, 50.0)
        self.assertEqual(result.expected_actions, 500)
        self.assertEqual(result.total_budget, 25000)
        self.assertEqual(result.daily_budget, 2500)

    def test_sales_high_scenario(self):
        """Sales goal, 50k audience, 10 days, high tier."""
        result = estimate_budget("sales", 50000, 10, "high")

        self.assertEqual(result.cost_per_result, 42.5)
        self.assertEqual(result.expected_actions, 1000)
        self.assertEqual(result.total_budget, 42500)
        self.assertEqual(result.daily_budget, 4250)

    def test_traffic_low_tier(self):
        result = estimate_budget("traffic", 50000, 10, "low")

        self.assertEqual(result.cost_per_result, 8.4)
        self.assertEqual(result.expected_actions, 250)
        self.assertEqual(result.total_budget, 2100)
        self.assertEqual(result.daily_budget, 210)

    def test_leads_high_tier(self):
        result = estimate_budget("leads", 50000, 10, "high")

        self.assertEqual(result.cost_per_result, 17.0)
        self.assertEqual(result.expected_actions, 1000)
        self.assertEqual(result.total_budget, 17000)
        self.assertEqual(result.daily_budget, 1700)

    def test_other_goal_maps_to_engagement(self):
        result = estimate_budget("other", 50000, 10, "high")

        self.assertEqual(result.cost_per_result, 2.55)
        self.assertEqual(result.expected_actions, 1000)
        self.assertEqual(result.total_budget, 2550)

    def test_baseline_actions_capped(self):
        """Audiences above 100k hit the 1000 action cap."""
        self.assertEqual(baseline_actions(100000), 1000)
        self.assertEqual(baseline_actions(5_000_000), 1000)
        self.assertEqual(baseline_actions(99_999), 999)

        result = estimate_budget("traffic", 5_000_000, 30, "high")
        self.assertEqual(result.expected_actions, 2000)
        self.assertEqual(result.total_budget, 11900)
        self.assertEqual(result.daily_budget, 397)

    def test_zero_audience(self):
        result = estimate_budget("sales", 0, 10, "medium")

        self.assertEqual(result.expected_actions, 0)
        self.assertEqual(result.total_budget, 0)
        self.assertEqual(result.daily_budget, 0)
        self.assertEqual(result.cost_per_result, 50.0)

    def test_negative_audience_treated_as_zero(self):
        result = estimate_budget("sales", -500, 10, "medium")
        self.assertEqual(result.expected_actions, 0)

    def test_duration_floor(self):
        """Zero or negative durations are treated as one day."""
        for duration in [0, -5]:
            result = estimate_budget("sales", 50000, duration, "medium")
            self.assertEqual(result.daily_budget, result.total_budget)

    def test_daily_budget_rounds_up(self):
        result = estimate_budget("sales", 50000, 7, "medium")
        self.assertEqual(result.daily_budget, 3572)

    def test_enum_and_case_insensitive_inputs(self):
        by_enum = estimate_budget(AdGoal.SALES, 50000, 10, QualityTier.MEDIUM)
        by_string = estimate_budget(" Sales ", 50000, 10, "MEDIUM")
        self.assertEqual(by_enum, by_string)

    def test_higher_tier_is_more_efficient(self):
        """Cost per result falls and suggested actions rise with tier."""
        low = estimate_budget("leads", 50000, 10, "low")
        medium = estimate_budget("leads", 50000, 10, "medium")
        high = estimate_budget("leads", 50000, 10, "high")

        self.assertGreater(low.cost_per_result, medium.cost_per_result)
        self.assertGreater(medium.cost_per_result, high.cost_per_result)
        self.assertLess(low.expected_actions, medium.expected_actions)
        self.assertLess(medium.expected_actions, high.expected_actions)

    def test_budget_grows_with_audience_until_cap(self):
        previous = 0
        for audience in [1000, 10000, 50000, 100000]:
            result = estimate_budget("traffic", audience, 10, "medium")
            self.assertGreaterEqual(result.total_budget, previous)
            previous = result.total_budget

        self.assertEqual(
            estimate_budget("traffic", 100000, 10, "medium"),
            estimate_budget("traffic", 10_000_000, 10, "medium"),
        )


class TestGoalResolution(unittest.TestCase):
    """Test cases for goal and tier handling."""

    def test_goal_mapping(self):
        self.assertEqual(resolve_outcome_category("traffic"), OutcomeCategory.TRAFFIC)
        self.assertEqual(resolve_outcome_category("leads"), OutcomeCategory.LEADS)
        self.assertEqual(resolve_outcome_category("sales"), OutcomeCategory.CONVERSIONS)
        self.assertEqual(resolve_outcome_category("other"), OutcomeCategory.ENGAGEMENT)

    def test_unknown_goal_is_an_error(self):
        result = estimate_budget("awareness", 50000, 10, "medium")

        self.assertIsInstance(result, EstimationError)
        self.assertEqual(result.code, INVALID_GOAL)

        reverse = reverse_estimate_from_budget("awareness", 50000, 10, 5000, "medium")
        self.assertIsInstance(reverse, EstimationError)
        self.assertEqual(reverse.code, INVALID_GOAL)

    def test_unknown_goal_with_fallback(self):
        result = estimate_budget("awareness", 50000, 10, "medium", allow_goal_fallback=True)

        self.assertIsInstance(result, EstimationResult)
        self.assertEqual(result.cost_per_result, 3.0)

    def test_unknown_tier_is_an_error(self):
        result = estimate_budget("sales", 50000, 10, "premium")

        self.assertIsInstance(result, EstimationError)
        self.assertEqual(result.code, INVALID_TIER)

    def test_cost_per_result_table(self):
        self.assertEqual(cost_per_result(OutcomeCategory.CONVERSIONS, QualityTier.LOW), 60.0)
        self.assertEqual(cost_per_result(OutcomeCategory.ENGAGEMENT, QualityTier.LOW), 3.6)
        self.assertEqual(cost_per_result(OutcomeCategory.TRAFFIC, QualityTier.HIGH), 5.95)


class TestReverseEstimate(unittest.TestCase):
    """Test cases for reverse_estimate_from_budget."""

    def test_sales_budget(self):
        result = reverse_estimate_from_budget("sales", 50000, 10, 5000, "medium")

        self.assertEqual(result.total_budget, 5000)
        self.assertEqual(result.daily_budget, 500)
        self.assertEqual(result.expected_actions, 100)
        self.assertEqual(result.cost_per_result, 50.0)

    def test_traffic_low_scenario(self):
        """Traffic goal, no audience, 7 days, 700 budget, low tier."""
        result = reverse_estimate_from_budget("traffic", 0, 7, 700, "low")

        self.assertEqual(result.cost_per_result, 8.4)
        self.assertEqual(result.expected_actions, 83)
        self.assertEqual(result.daily_budget, 100)
        self.assertEqual(result.total_budget, 700)

    def test_fractional_budget_just_under_one_result(self):
        result = reverse_estimate_from_budget("sales", 0, 1, 49.9999999, "medium")

        self.assertEqual(result.expected_actions, 0)
        self.assertEqual(result.daily_budget, 50)
        self.assertEqual(result.total_budget, 49.9999999)

    def test_fractional_budgets_floor_exactly(self):
        self.assertEqual(reverse_estimate_from_budget("traffic", 0, 1, 84.0, "low").expected_actions, 10)
        self.assertEqual(reverse_estimate_from_budget("traffic", 0, 1, 83.9999, "low").expected_actions, 9)
        self.assertEqual(reverse_estimate_from_budget("other", 0, 1, 25.5, "high").expected_actions, 10)
        self.assertEqual(reverse_estimate_from_budget("other", 0, 1, 25.4999999, "high").expected_actions, 9)

    def test_daily_budget_fraction_rounds_up(self):
        result = reverse_estimate_from_budget("sales", 0, 3, 100.0000001, "medium")
        self.assertEqual(result.daily_budget, 34)

    def test_non_finite_budget_treated_as_zero(self):
        for budget in [float("nan"), float("inf")]:
            result = reverse_estimate_from_budget("sales", 0, 5, budget, "medium")
            self.assertEqual(result.total_budget, 0)
            self.assertEqual(result.expected_actions, 0)

    def test_actions_round_down(self):
        result = reverse_estimate_from_budget("sales", 50000, 10, 5049, "medium")
        self.assertEqual(result.expected_actions, 100)

    def test_zero_and_negative_budget(self):
        for budget in [0, -1000]:
            result = reverse_estimate_from_budget("traffic", 50000, 10, budget, "medium")
            self.assertEqual(result.total_budget, 0)
            self.assertEqual(result.daily_budget, 0)
            self.assertEqual(result.expected_actions, 0)

    def test_audience_does_not_affect_result(self):
        small = reverse_estimate_from_budget("leads", 100, 10, 8000, "high")
        large = reverse_estimate_from_budget("leads", 10_000_000, 10, 8000, "high")
        self.assertEqual(small, large)

    def test_duration_floor(self):
        result = reverse_estimate_from_budget("leads", 50000, 0, 8000, "medium")
        self.assertEqual(result.daily_budget, 8000)

    def test_round_trip_matches_forward(self):
        """Feeding a suggestion back in reproduces its CPR and actions."""
        for goal in ["traffic", "leads", "sales", "other"]:
            for tier in ["low", "medium", "high"]:
                for audience in [1234, 50000, 250000]:
                    forward = estimate_budget(goal, audience, 14, tier)
                    reverse = reverse_estimate_from_budget(goal, audience, 14, forward.total_budget, tier)

                    self.assertEqual(reverse.cost_per_result, forward.cost_per_result)
                    self.assertEqual(reverse.daily_budget, forward.daily_budget)
                    self.assertLessEqual(abs(reverse.expected_actions - forward.expected_actions), 1)


if __name__ == '__main__':
    unittest.main()
