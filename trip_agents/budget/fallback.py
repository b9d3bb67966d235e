"""
Proportional budget reallocation.

The deterministic path of budget reconciliation, also used to attach any
new breakdown to an existing plan.
"""

from trip_agents.budget.allocation import (
    FALLBACK_SPENT_RATIO,
    default_breakdown,
    round_half_up,
    scale_breakdown,
)
from trip_agents.budget.schemas import ReconciliationResult
from trip_agents.shared.contracts.itinerary import BudgetBreakdown, GeneratedPlan, Itinerary


def rebalance_plan(
    plan: GeneratedPlan,
    breakdown: BudgetBreakdown,
    old_budget: float,
    new_budget: float,
) -> GeneratedPlan:
    """
    Attach a new breakdown to a plan and rescale each day's allocation.

    Args:
        plan: Existing generated plan
        breakdown: Breakdown for the new budget
        old_budget: Budget the plan was made for
        new_budget: Target budget

    Returns:
        Updated copy of the plan
    """
    days = plan.daily_itinerary
    if old_budget > 0:
        scale_factor = new_budget / old_budget
        days = [
            day.model_copy(update={"budget_allocated": round_half_up(day.budget_allocated * scale_factor)})
            for day in days
        ]
    return plan.model_copy(update={"budget_breakdown": breakdown, "daily_itinerary": days})


def fallback_reconciliation(
    itinerary: Itinerary,
    new_budget: float,
    spent_ratio: float = FALLBACK_SPENT_RATIO,
) -> ReconciliationResult:
    """
    Deterministic proportional reallocation; always succeeds.

    Every category is scaled by new_budget / old_budget and rounded.
    total_spent and remaining_budget are fixed to a 95/5 split of the new
    budget, independent of the scaled category sum. An itinerary without
    a positive original budget is seeded from the default weights.

    Args:
        itinerary: Itinerary being re-budgeted
        new_budget: Target budget (> 0)
        spent_ratio: Share of the new budget reported as spent

    Returns:
        ReconciliationResult with strategy "fallback"
    """
    details = itinerary.trip_details
    old_budget = details.total_budget

    if old_budget > 0:
        breakdown = scale_breakdown(
            itinerary.budget_breakdown, old_budget, new_budget, details.total_days, spent_ratio
        )
    else:
        seed = default_breakdown(new_budget, details.total_days)
        breakdown = scale_breakdown(seed, new_budget, new_budget, details.total_days, spent_ratio)

    plan = rebalance_plan(itinerary.ai_generated_plan, breakdown, old_budget, new_budget)
    return ReconciliationResult(budget_breakdown=breakdown, ai_generated_plan=plan, strategy="fallback")
