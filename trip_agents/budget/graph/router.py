"""
Routing logic for the budget graph.

Sends the flow to the proportional fallback whenever the AI rebalance
did not produce a breakdown.
"""

import logging
from typing import Literal

from trip_agents.budget.schemas import BudgetState


logger = logging.getLogger(__name__)


def route_after_rebalance(state: BudgetState) -> Literal["fallback", "complete"]:
    """
    Decide whether the AI result can be used.

    Routing logic:
    1. If the rebalance recorded errors or left no breakdown -> fallback
    2. Otherwise -> complete

    Args:
        state: Current budget state

    Returns:
        Name of the next node to execute
    """
    session_id = state.get("session_id") or "unknown"
    has_breakdown = state.get("budget_breakdown") is not None
    error_count = len(state.get("errors") or [])
    _log = f"[session={session_id}] [graph=budget] [router=route_after_rebalance] "

    if error_count or not has_breakdown:
        logger.info(f"{_log}Routing to 'fallback' | breakdown={has_breakdown}, errors={error_count}")
        return "fallback"

    logger.info(f"{_log}Routing to 'complete' | breakdown={has_breakdown}, errors={error_count}")
    return "complete"
