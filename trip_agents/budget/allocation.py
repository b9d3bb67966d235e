"""
Deterministic budget allocation rules.

Holds the fixed category weights used when a generated plan has no
usable breakdown, and the proportional scaling used when an AI budget
reconciliation fails.
"""

import math
from typing import Dict

from trip_agents.shared.contracts.itinerary import BUDGET_CATEGORIES, BudgetBreakdown


DEFAULT_CATEGORY_WEIGHTS: Dict[str, float] = {
    "flights": 0.35,
    "accommodation": 0.30,
    "activities": 0.15,
    "food": 0.15,
    "transportation": 0.05,
    "shopping": 0.0,
    "miscellaneous": 0.0,
}

FALLBACK_SPENT_RATIO = 0.95


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def daily_average(total_budget: float, total_days: int) -> int:
    return round_half_up(total_budget / max(total_days, 1))


def default_breakdown(total_budget: float, total_days: int) -> BudgetBreakdown:
    """
    Build a breakdown from the fixed category weights.

    Args:
        total_budget: Trip budget to allocate
        total_days: Trip length, for the daily average

    Returns:
        BudgetBreakdown whose totals are derived from the category sum
    """
    categories = {
        name: round_half_up(total_budget * DEFAULT_CATEGORY_WEIGHTS[name])
        for name in BUDGET_CATEGORIES
    }
    total_spent = sum(categories.values())
    return BudgetBreakdown(
        **categories,
        total_spent=total_spent,
        remaining_budget=total_budget - total_spent,
        daily_average=daily_average(total_budget, total_days),
    )


def scale_breakdown(
    breakdown: BudgetBreakdown,
    old_budget: float,
    new_budget: float,
    total_days: int,
    spent_ratio: float = FALLBACK_SPENT_RATIO,
) -> BudgetBreakdown:
    """
    Proportionally scale every category to a new budget.

    Totals are fixed to a spent/remaining split of the new budget and are
    not derived from the scaled categories, so the category sum and
    total_spent can disagree.

    Args:
        breakdown: Existing breakdown to scale
        old_budget: Budget the breakdown was made for (must be > 0)
        new_budget: Target budget
        total_days: Trip length, for the daily average
        spent_ratio: Share of the new budget reported as spent

    Returns:
        Scaled BudgetBreakdown
    """
    scale_factor = new_budget / old_budget
    categories = {
        name: round_half_up(amount * scale_factor)
        for name, amount in breakdown.categories().items()
    }
    return BudgetBreakdown(
        **categories,
        total_spent=round_half_up(new_budget * spent_ratio),
        remaining_budget=round_half_up(new_budget * round(1 - spent_ratio, 6)),
        daily_average=daily_average(new_budget, total_days),
    )
