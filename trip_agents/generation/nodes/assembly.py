"""
Assembly node for the LangGraph workflow.

Final node that turns the normalized plan into a draft itinerary.
"""

import logging
from typing import Any, Dict

from trip_agents.generation.assembler import assemble_itinerary
from trip_agents.generation.graph.config import GenerationGraphConfig
from trip_agents.generation.response_parser import NormalizedResponse
from trip_agents.generation.schemas import GenerationState
from trip_agents.shared.contracts.itinerary import BudgetBreakdown, GeneratedPlan
from trip_agents.shared.contracts.trip_parameters import TripParameters


logger = logging.getLogger(__name__)


def assemble_node(state: GenerationState, config: GenerationGraphConfig) -> Dict[str, Any]:
    """
    Assemble the draft itinerary.

    Args:
        state: Current generation state (generated_plan populated)
        config: Generation configuration (confidence score)

    Returns:
        Dictionary with the itinerary and a tracking message
    """
    session_id = state.get("session_id") or "unknown"
    _log = f"[session={session_id}] [graph=generation] [node=assemble] "

    params = TripParameters.model_validate(state["trip_parameters"])
    breakdown = state.get("budget_breakdown")
    normalized = NormalizedResponse(
        plan=GeneratedPlan.model_validate(state["generated_plan"]),
        budget_breakdown=BudgetBreakdown.model_validate(breakdown) if breakdown is not None else None,
    )

    itinerary = assemble_itinerary(
        params,
        normalized,
        user_id=state["user_id"],
        now=state.get("now"),
        confidence_score=config.confidence_score,
    )

    logger.info(
        f"{_log}Itinerary assembled | id={itinerary.id}, status={itinerary.status}, "
        f"days={len(itinerary.ai_generated_plan.daily_itinerary)}, "
        f"spent={itinerary.budget_breakdown.total_spent}/{params.total_budget}"
    )

    return {
        "itinerary": itinerary.model_dump(),
        "messages": [
            {
                "role": "system",
                "agent": "generation",
                "content": (
                    f"Itinerary generated for {params.destination}: "
                    f"{len(itinerary.ai_generated_plan.daily_itinerary)} days, "
                    f"budget {itinerary.budget_breakdown.total_spent} of {params.total_budget}"
                ),
            }
        ],
    }
