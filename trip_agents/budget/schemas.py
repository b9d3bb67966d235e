"""
Schemas for the budget reconciliation graph.

Defines the state schema for LangGraph and the reconciliation result.
"""

from dataclasses import dataclass, field
from typing import TypedDict, List, Optional, Annotated, Literal
import operator

from trip_agents.shared.contracts.itinerary import BudgetBreakdown, GeneratedPlan


class BudgetState(TypedDict):
    """
    State schema for budget reconciliation.

    budget_breakdown stays None until one of the two strategies
    (AI rebalance or proportional fallback) fills it.
    """

    # Inputs
    itinerary: dict
    new_budget: float

    # Outputs
    budget_breakdown: Optional[dict]
    ai_generated_plan: Optional[dict]
    strategy: Optional[str]

    # Tracking
    errors: Annotated[List[str], operator.add]
    messages: Annotated[List[dict], operator.add]
    session_id: Optional[str]


@dataclass
class ReconciliationResult:
    """Updated plan and breakdown for a new budget."""

    budget_breakdown: BudgetBreakdown
    ai_generated_plan: GeneratedPlan
    strategy: Literal["ai", "fallback"]
    errors: List[str] = field(default_factory=list)
