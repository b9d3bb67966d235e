"""
Budget reconciliation.

Re-fits an itinerary's budget breakdown to a new target budget, first by
asking the generative service, then by proportional scaling when that
fails for any reason.
"""

import logging
import uuid
from typing import Optional

from trip_agents.budget.graph.build import create_budget_graph
from trip_agents.budget.graph.config import BudgetGraphConfig, DEFAULT_CONFIG
from trip_agents.budget.schemas import ReconciliationResult
from trip_agents.shared.contracts.itinerary import BudgetBreakdown, GeneratedPlan, Itinerary
from trip_agents.shared.errors import PreconditionViolation
from trip_agents.shared.logging.config import log_itinerary_transition


logger = logging.getLogger(__name__)


def reconcile_budget(
    itinerary: Itinerary,
    new_budget: float,
    config: Optional[BudgetGraphConfig] = None,
    session_id: Optional[str] = None,
) -> ReconciliationResult:
    """
    Produce an updated plan and breakdown consistent with a new budget.

    Never raises for a positive new_budget: any failure of the AI path
    is recorded in the result's errors and the fallback is used.

    Args:
        itinerary: Itinerary being re-budgeted
        new_budget: Target budget
        config: Optional budget graph configuration
        session_id: Optional tracking id for log correlation

    Returns:
        ReconciliationResult

    Raises:
        PreconditionViolation: If new_budget is not positive
    """
    if new_budget is None or new_budget <= 0:
        raise PreconditionViolation("Invalid budget amount")
    if config is None:
        config = DEFAULT_CONFIG
    session_id = session_id or str(uuid.uuid4())
    _log = f"[session={session_id}] [graph=budget] [api=reconcile_budget] "

    logger.info(
        f"{_log}Reconciliation starting | itinerary={itinerary.id}, "
        f"old_budget={itinerary.trip_details.total_budget}, new_budget={new_budget}"
    )

    graph = create_budget_graph(config)
    initial_state = {
        "itinerary": itinerary.model_dump(),
        "new_budget": new_budget,
        "budget_breakdown": None,
        "ai_generated_plan": None,
        "strategy": None,
        "errors": [],
        "messages": [],
        "session_id": session_id,
    }
    final_state = graph.invoke(initial_state, {"recursion_limit": config.recursion_limit})

    result = ReconciliationResult(
        budget_breakdown=BudgetBreakdown.model_validate(final_state["budget_breakdown"]),
        ai_generated_plan=GeneratedPlan.model_validate(final_state["ai_generated_plan"]),
        strategy=final_state["strategy"],
        errors=final_state.get("errors", []),
    )

    log_itinerary_transition(
        "budget_reconciled",
        itinerary,
        extra={
            "strategy": result.strategy,
            "new_budget": new_budget,
            "total_spent": result.budget_breakdown.total_spent,
            "errors": result.errors,
        },
    )
    return result
