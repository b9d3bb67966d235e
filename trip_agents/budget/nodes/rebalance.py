"""
Budget nodes for the LangGraph workflow.

rebalance asks the generative service for a new breakdown and records any
failure instead of raising; fallback scales the existing breakdown and
cannot fail for a positive budget.
"""

import logging
import time
from typing import Any, Dict

from trip_agents.budget.fallback import fallback_reconciliation, rebalance_plan
from trip_agents.budget.graph.config import BudgetGraphConfig
from trip_agents.budget.schemas import BudgetState
from trip_agents.generation.prompts.builders import build_budget_prompt
from trip_agents.generation.response_parser import parse_budget_response
from trip_agents.shared.contracts.itinerary import Itinerary
from trip_agents.shared.llm.client import generate_text


logger = logging.getLogger(__name__)


def _log_prefix(state: BudgetState, node: str) -> str:
    session_id = state.get("session_id") or "unknown"
    return f"[session={session_id}] [graph=budget] [node={node}] "


def rebalance_node(state: BudgetState, config: BudgetGraphConfig) -> Dict[str, Any]:
    """
    AI rebalance of the breakdown for the new budget.

    Args:
        state: Current budget state
        config: Budget configuration (model, sampling, timeout)

    Returns:
        Dictionary with the new breakdown, updated plan and strategy "ai",
        or with an error entry when any step fails
    """
    _log = _log_prefix(state, "rebalance")
    itinerary = Itinerary.model_validate(state["itinerary"])
    new_budget = state["new_budget"]
    old_budget = itinerary.trip_details.total_budget

    logger.info(f"{_log}Entering node | old_budget={old_budget}, new_budget={new_budget}, model={config.model}")

    try:
        prompt = build_budget_prompt(itinerary, new_budget)

        start_time = time.perf_counter()
        raw_response = generate_text(prompt, config.sampling())
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"{_log}Generative service responded | duration={duration_ms:.0f}ms, chars={len(raw_response)}")

        breakdown = parse_budget_response(raw_response, new_budget, itinerary.trip_details.total_days)
        plan = rebalance_plan(itinerary.ai_generated_plan, breakdown, old_budget, new_budget)

    except Exception as e:
        logger.warning(f"{_log}AI rebalance failed, falling back | error={type(e).__name__}: {e}")
        return {
            "errors": [f"{type(e).__name__}: {e}"],
            "messages": [{"role": "system", "content": f"AI rebalance failed: {e}"}],
        }

    logger.info(f"{_log}AI rebalance succeeded | total_spent={breakdown.total_spent}")
    return {
        "budget_breakdown": breakdown.model_dump(),
        "ai_generated_plan": plan.model_dump(),
        "strategy": "ai",
        "messages": [{"role": "assistant", "content": "Budget rebalanced by the generative service"}],
    }


def fallback_node(state: BudgetState, config: BudgetGraphConfig) -> Dict[str, Any]:
    """
    Proportional reallocation of the existing breakdown.

    Args:
        state: Current budget state
        config: Budget configuration (spent ratio)

    Returns:
        Dictionary with the scaled breakdown, updated plan and strategy "fallback"
    """
    _log = _log_prefix(state, "fallback")
    itinerary = Itinerary.model_validate(state["itinerary"])

    result = fallback_reconciliation(itinerary, state["new_budget"], config.spent_ratio)

    logger.info(
        f"{_log}Fallback applied | new_budget={state['new_budget']}, "
        f"total_spent={result.budget_breakdown.total_spent}, "
        f"remaining={result.budget_breakdown.remaining_budget}"
    )
    return {
        "budget_breakdown": result.budget_breakdown.model_dump(),
        "ai_generated_plan": result.ai_generated_plan.model_dump(),
        "strategy": "fallback",
        "messages": [{"role": "system", "content": "Budget scaled proportionally"}],
    }
