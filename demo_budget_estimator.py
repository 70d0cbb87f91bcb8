#!/usr/bin/env python3
"""
Demo script for the budget estimator.

Shows forward estimates across goals and tiers, the reverse estimate from a
fixed budget, and how the calculator switches between suggested and manual
budgets.
"""

from datetime import date

from business_logic.budget_estimator import estimate_budget, reverse_estimate_from_budget
from business_logic.budget_session import BudgetCalculatorState, campaign_duration_days
from business_logic.campaign_validator import CampaignValidator
from models.data_models import CampaignBrief, EstimationError
from ui.formatting import format_cpr, format_currency, format_number


def print_result(label, result):
    if isinstance(result, EstimationError):
        print(f"{label:<28} error: {result.message}")
        return
    print(f"{label:<28} total {format_currency(result.total_budget):>12}  "
          f"daily {format_currency(result.daily_budget):>10}  "
          f"actions {format_number(result.expected_actions):>6}  "
          f"CPR {format_cpr(result.cost_per_result)}")


def demo_forward_estimates():
    """Suggested budgets for every goal and tier."""
    print("=" * 60)
    print("FORWARD ESTIMATES (audience 50,000, 10 days)")
    print("=" * 60)

    for goal in ['traffic', 'leads', 'sales', 'other']:
        for tier in ['low', 'medium', 'high']:
            print_result(f"{goal}/{tier}", estimate_budget(goal, 50000, 10, tier))
        print()

    print_result("large audience (cap)", estimate_budget('traffic', 5_000_000, 30, 'high'))
    print_result("unknown goal", estimate_budget('awareness', 50000, 10, 'medium'))
    print_result("unknown goal (fallback)", estimate_budget('awareness', 50000, 10, 'medium',
                                                           allow_goal_fallback=True))


def demo_reverse_estimates():
    """Outcomes implied by a fixed budget."""
    print("\n" + "=" * 60)
    print("REVERSE ESTIMATES (sales, 10 days)")
    print("=" * 60)

    for budget in [0, 5000, 25000, 100000]:
        print_result(f"budget {format_currency(budget)}",
                     reverse_estimate_from_budget('sales', 50000, 10, budget, 'medium'))


def demo_calculator_session():
    """Manual override surviving input changes, reset on tier change."""
    print("\n" + "=" * 60)
    print("CALCULATOR SESSION")
    print("=" * 60)

    brief = CampaignBrief(
        username="demo.brand",
        ad_goal="leads",
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 14),
    )
    validation = CampaignValidator().validate_for_generation(brief)
    print(f"Brief valid: {validation.is_valid}")

    duration = campaign_duration_days(brief.start_date, brief.end_date)
    state = BudgetCalculatorState(goal=brief.ad_goal, audience_size=50000, duration_days=duration)
    print(f"Mode: {state.mode.value}")
    print_result("suggested", state.snapshot())

    state.edit_budget(12000)
    print(f"Mode: {state.mode.value}")
    print_result("manual 12,000", state.snapshot())

    state.update_inputs(audience_size=2_000_000)
    print_result("audience grows (manual)", state.snapshot())

    state.change_quality_tier('high')
    print(f"Mode: {state.mode.value}")
    print_result("tier high (suggested)", state.snapshot())


def main():
    """Run all demos."""
    print("BUDGET ESTIMATOR DEMO")
    print("=" * 60)
    print()

    try:
        demo_forward_estimates()
        demo_reverse_estimates()
        demo_calculator_session()

        print("\n" + "=" * 60)
        print("DEMO COMPLETED SUCCESSFULLY!")
        print("=" * 60)

    except Exception as e:
        print(f"\nDemo failed with error: {str(e)}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
